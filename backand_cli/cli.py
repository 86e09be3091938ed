"""
Backand CLI - Command-line interface for the Backand REST API.

This layer provides the user-facing CLI commands, using the SDK layer
for all operations. It handles:
- Argument parsing
- TTY detection for human vs machine output
- Pretty formatting for human output
- JSON output for piping/automation
"""

import argparse
import getpass
import json
import logging
import sys
from pathlib import Path
from typing import Any

from backand_cli.core.client import BackandError, ValidationError
from backand_cli.core.store import FileStore
from backand_cli.core.types import (
    Action,
    AuthMode,
    Deep,
    Exclude,
    ExcludeOption,
    Filter,
    FilterOperator,
    Filters,
    PageNumber,
    PageSize,
    RelatedObjects,
    RequestOption,
    Result,
    ReturnObject,
    Search,
    Sort,
    Sorter,
    SortOrder,
)
from backand_cli.sdk import BackandClient

# =============================================================================
# Output Helpers
# =============================================================================


HUMAN_LIMIT = 20  # Default page size for human-readable output

EXCLUDE_CHOICES = {
    "metadata": ExcludeOption.METADATA,
    "totalRows": ExcludeOption.TOTAL_ROWS,
}


def is_tty() -> bool:
    """Check if stdout is a TTY (human) or pipe (machine)."""
    return sys.stdout.isatty()


def json_output(data: Any, pretty: bool = False) -> None:
    """Print JSON output."""
    indent = 2 if pretty or is_tty() else None
    print(json.dumps(data, indent=indent, default=str))


def error_output(error: BackandError) -> None:
    """Print error and exit."""
    json_output(error.to_dict())
    sys.exit(1)


def success_output(data: Any) -> None:
    """Print success output."""
    json_output(data)


def table_output(
    headers: list[str],
    rows: list[list[str]],
    widths: list[int],
) -> None:
    """Print a formatted table for human output."""
    header_line = "  ".join(h.ljust(w) for h, w in zip(headers, widths))
    print(header_line)
    print("-" * len(header_line))

    for row in rows:
        print("  ".join(str(v)[:w].ljust(w) for v, w in zip(row, widths)))


def result_value(result: Result) -> Any:
    """Return the value of a Result, raising its error on failure."""
    return result.unwrap()


# =============================================================================
# Argument Parsing Helpers
# =============================================================================


def parse_json_arg(value: str, flag: str) -> Any:
    """Parse a JSON argument, or read JSON from stdin when value is '-'."""
    try:
        if value == "-":
            return json.load(sys.stdin)
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON in {flag}: {e}")


def parse_scalar(value: str) -> Any:
    """Parse a value as JSON, otherwise treat it as a string."""
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


def parse_filter(arg: str) -> Filter:
    """Parse FIELD:OPERATOR[:VALUE] into a Filter."""
    parts = arg.split(":", 2)
    if len(parts) < 2 or not parts[0]:
        raise ValidationError(
            f"Invalid --filter '{arg}'",
            details={"expected": "FIELD:OPERATOR[:VALUE]"},
        )
    try:
        operator = FilterOperator(parts[1])
    except ValueError:
        raise ValidationError(
            f"Unknown filter operator '{parts[1]}'",
            details={"operators": [op.value for op in FilterOperator]},
        )
    value = parse_scalar(parts[2]) if len(parts) == 3 else None
    return Filter(parts[0], operator, value)


def parse_sorter(arg: str) -> Sorter:
    """Parse FIELD[:asc|desc] into a Sorter."""
    field_name, _, order = arg.partition(":")
    if not field_name:
        raise ValidationError(f"Invalid --sort '{arg}'", details={"expected": "FIELD[:asc|desc]"})
    try:
        return Sorter(field_name, SortOrder(order or "asc"))
    except ValueError:
        raise ValidationError(f"Unknown sort order '{order}'", details={"orders": ["asc", "desc"]})


def build_options(args: argparse.Namespace) -> list[RequestOption]:
    """Collect request options from parsed arguments, in a stable order."""
    options: list[RequestOption] = []
    if getattr(args, "page_size", None) is not None:
        options.append(PageSize(args.page_size))
    if getattr(args, "page", None) is not None:
        options.append(PageNumber(args.page))
    if getattr(args, "filter", None):
        options.append(Filters([parse_filter(f) for f in args.filter]))
    if getattr(args, "sort", None):
        options.append(Sort([parse_sorter(s) for s in args.sort]))
    if getattr(args, "exclude", None):
        options.append(Exclude([EXCLUDE_CHOICES[e] for e in args.exclude]))
    if getattr(args, "deep", False):
        options.append(Deep(True))
    if getattr(args, "related", False):
        options.append(RelatedObjects(True))
    if getattr(args, "return_object", False):
        options.append(ReturnObject(True))
    if getattr(args, "search", None):
        options.append(Search(args.search))
    return options


# =============================================================================
# CLI Commands
# =============================================================================


def cmd_items_list(client: BackandClient, args: argparse.Namespace) -> None:
    """List items of an object."""
    try:
        if is_tty() and args.page_size is None:
            args.page_size = HUMAN_LIMIT
        data = result_value(client.get_items(args.object, options=build_options(args) or None))

        if is_tty() and isinstance(data, dict) and isinstance(data.get("data"), list):
            items = data["data"]
            if not items:
                print("No items found.")
                return

            table_output(
                ["ID", "Item"],
                [
                    [item.get("id", "") if isinstance(item, dict) else "", json.dumps(item, default=str)[:70]]
                    for item in items
                ],
                [12, 70],
            )

            total = data.get("totalRows")
            if isinstance(total, int) and total > len(items):
                print(f"\nShowing {len(items)} of {total} items")
        else:
            success_output(data)
    except BackandError as e:
        error_output(e)


def cmd_items_get(client: BackandClient, args: argparse.Namespace) -> None:
    """Get an item by ID."""
    try:
        success_output(result_value(client.get_item(args.object, args.item_id, options=build_options(args) or None)))
    except BackandError as e:
        error_output(e)


def cmd_items_create(client: BackandClient, args: argparse.Namespace) -> None:
    """Create a new item."""
    try:
        fields = parse_json_arg(args.fields, "--fields")
        if not isinstance(fields, dict):
            raise ValidationError("--fields must be a JSON object")
        options = build_options(args)
        success_output(result_value(client.create_item(args.object, fields, options=options or None)))
    except BackandError as e:
        error_output(e)


def cmd_items_update(client: BackandClient, args: argparse.Namespace) -> None:
    """Update an item."""
    try:
        fields = parse_json_arg(args.fields, "--fields")
        if not isinstance(fields, dict):
            raise ValidationError("--fields must be a JSON object")
        options = build_options(args)
        result = client.update_item(args.object, args.item_id, fields, options=options or None)
        success_output(result_value(result))
    except BackandError as e:
        error_output(e)


def cmd_items_delete(client: BackandClient, args: argparse.Namespace) -> None:
    """Delete an item."""
    try:
        result_value(client.delete_item(args.object, args.item_id))
        success_output({"success": True, "message": f"Item {args.item_id} deleted from {args.object}"})
    except BackandError as e:
        error_output(e)


def cmd_query(client: BackandClient, args: argparse.Namespace) -> None:
    """Run a named query."""
    try:
        params = parse_json_arg(args.params, "--params") if args.params else None
        if params is not None and not isinstance(params, dict):
            raise ValidationError("--params must be a JSON object")
        success_output(result_value(client.run_query(args.name, params)))
    except BackandError as e:
        error_output(e)


def cmd_bulk(client: BackandClient, args: argparse.Namespace) -> None:
    """Run bulk actions from a JSON file."""
    try:
        if args.file == "-":
            raw = parse_json_arg("-", "bulk input")
        else:
            path = Path(args.file)
            if not path.exists():
                raise ValidationError(f"File not found: {args.file}")
            raw = parse_json_arg(path.read_text(encoding="utf-8"), args.file)

        if not isinstance(raw, list):
            raise ValidationError("Bulk input must be a JSON list of actions")
        try:
            actions = [Action.from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid action: {e}")

        success_output(result_value(client.perform_actions(actions)))
    except BackandError as e:
        error_output(e)


def cmd_auth_signin(client: BackandClient, args: argparse.Namespace) -> None:
    """Sign a user in and store the token."""
    try:
        password = args.password or getpass.getpass("Password: ")
        result_value(client.sign_in(args.username, password))
        success_output(
            {
                "signed_in": client.user_signed_in(),
                "username": args.username,
                "mode": client.session.mode.value,
            }
        )
    except BackandError as e:
        error_output(e)


def cmd_auth_signup(client: BackandClient, args: argparse.Namespace) -> None:
    """Register a new user."""
    try:
        user = parse_json_arg(args.fields, "--fields")
        if not isinstance(user, dict):
            raise ValidationError("--fields must be a JSON object")
        data = result_value(client.sign_up(user, sign_in_after_sign_up=not args.no_signin))
        success_output(
            {
                "signed_in": client.session.mode == AuthMode.USER,
                "mode": client.session.mode.value,
                "response": data,
            }
        )
    except BackandError as e:
        error_output(e)


def cmd_auth_signout(client: BackandClient, _args: argparse.Namespace) -> None:
    """Sign the current user out."""
    client.sign_out()
    success_output({"success": True, "message": "Signed out"})


def cmd_auth_status(client: BackandClient, _args: argparse.Namespace) -> None:
    """Show sign-in status and configuration."""
    session = client.session
    if is_tty():
        print(f"App: {session.app_name or '(not set)'}")
        print(f"API URL: {session.base_url}")
        print(f"Mode: {session.mode.value}")
        print(f"Signed in: {'yes' if client.user_signed_in() else 'no'}")
    else:
        success_output(
            {
                "app_name": session.app_name,
                "api_url": session.base_url,
                "mode": session.mode.value,
                "signed_in": client.user_signed_in(),
            }
        )


# =============================================================================
# Main CLI
# =============================================================================


def add_read_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--deep", action="store_true", help="Include related objects (deep)")
    parser.add_argument("--related", action="store_true", help="Return related objects")
    parser.add_argument(
        "--exclude",
        action="append",
        choices=sorted(EXCLUDE_CHOICES),
        help="Leave a section out of the response (repeatable)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        description="Backand CLI - Command-line interface for the Backand REST API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Output Modes:
  TTY (human):  Tables, pretty JSON, first page only
  Pipe:         Compact JSON

Examples:
  backand items list todos --filter done:equals:false --sort created:desc
  backand items create todos --fields '{"title": "Write docs"}'
  backand query openTodos --params '{"owner": "jane"}'
  backand auth signin jane@example.com
""",
    )
    parser.add_argument("--app", help="App name (overrides BACKAND_APP_NAME)")
    parser.add_argument("--api-url", help="API base URL (overrides BACKAND_API_URL)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log requests to stderr")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # ========== Items ==========
    items = subparsers.add_parser("items", help="Read and write object items")
    items.set_defaults(func=lambda _c, _a: items.print_help())
    items_sub = items.add_subparsers(dest="subcommand")

    i_list = items_sub.add_parser("list", help="List items")
    i_list.add_argument("object", help="Object name")
    i_list.add_argument("--page-size", "-l", type=int, help="Items per page")
    i_list.add_argument("--page", "-p", type=int, help="Page number")
    i_list.add_argument("--filter", "-f", action="append", help="FIELD:OPERATOR[:VALUE] (repeatable)")
    i_list.add_argument("--sort", "-s", action="append", help="FIELD[:asc|desc] (repeatable)")
    i_list.add_argument("--search", help="Free-text search")
    add_read_options(i_list)
    i_list.set_defaults(func=cmd_items_list)

    i_get = items_sub.add_parser("get", help="Get item details")
    i_get.add_argument("object", help="Object name")
    i_get.add_argument("item_id", help="Item ID")
    add_read_options(i_get)
    i_get.set_defaults(func=cmd_items_get)

    i_create = items_sub.add_parser("create", help="Create an item")
    i_create.add_argument("object", help="Object name")
    i_create.add_argument("--fields", required=True, help="JSON object with item fields (or - for stdin)")
    i_create.add_argument("--return-object", action="store_true", help="Return the created item")
    i_create.set_defaults(func=cmd_items_create)

    i_update = items_sub.add_parser("update", help="Update an item")
    i_update.add_argument("object", help="Object name")
    i_update.add_argument("item_id", help="Item ID")
    i_update.add_argument("--fields", required=True, help="JSON object with item fields (or - for stdin)")
    i_update.add_argument("--return-object", action="store_true", help="Return the updated item")
    i_update.set_defaults(func=cmd_items_update)

    i_delete = items_sub.add_parser("delete", help="Delete an item")
    i_delete.add_argument("object", help="Object name")
    i_delete.add_argument("item_id", help="Item ID")
    i_delete.set_defaults(func=cmd_items_delete)

    # ========== Query ==========
    query = subparsers.add_parser("query", help="Run a named query")
    query.add_argument("name", help="Query name")
    query.add_argument("--params", help="JSON object with query parameters (or - for stdin)")
    query.set_defaults(func=cmd_query)

    # ========== Bulk ==========
    bulk = subparsers.add_parser("bulk", help="Run bulk actions")
    bulk.add_argument("file", help="JSON list of {method, url, data} actions (or - for stdin)")
    bulk.set_defaults(func=cmd_bulk)

    # ========== Auth ==========
    auth = subparsers.add_parser("auth", help="Sign in, sign up and sign out")
    auth.set_defaults(func=lambda _c, _a: auth.print_help())
    auth_sub = auth.add_subparsers(dest="subcommand")

    a_signin = auth_sub.add_parser("signin", help="Sign in and store the user token")
    a_signin.add_argument("username", help="User email")
    a_signin.add_argument("--password", help="Password (prompted when omitted)")
    a_signin.set_defaults(func=cmd_auth_signin)

    a_signup = auth_sub.add_parser("signup", help="Register a new user")
    a_signup.add_argument("--fields", required=True, help="JSON object with user fields (or - for stdin)")
    a_signup.add_argument("--no-signin", action="store_true", help="Don't sign in after sign-up")
    a_signup.set_defaults(func=cmd_auth_signup)

    a_signout = auth_sub.add_parser("signout", help="Forget the stored user token")
    a_signout.set_defaults(func=cmd_auth_signout)

    a_status = auth_sub.add_parser("status", help="Show sign-in status")
    a_status.set_defaults(func=cmd_auth_status)

    return parser


def create_client(args: argparse.Namespace) -> BackandClient:
    """Create a client with a persistent token store."""
    client = BackandClient(app_name=args.app, api_url=args.api_url, store=FileStore())
    if client.user_signed_in():
        client.set_auth_mode(AuthMode.USER)
    return client


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )

    client = create_client(args)

    # Run command (all subparsers have default funcs that print help)
    args.func(client, args)


if __name__ == "__main__":
    main()
