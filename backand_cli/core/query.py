"""
Query string rendering for request options.

The order of the options passed in is the order of the ``key=value``
pairs on the wire.
"""

import json
import urllib.parse
from collections.abc import Iterable
from typing import Any

from backand_cli.core.types import (
    Deep,
    Exclude,
    ExcludeOption,
    Filters,
    PageNumber,
    PageSize,
    RelatedObjects,
    RequestOption,
    ReturnObject,
    Search,
    Sort,
)


def _json_component(objects: list[dict[str, Any]]) -> str:
    """Serialize to compact JSON and percent-encode for a query component."""
    text = json.dumps(objects, separators=(",", ":"))
    return urllib.parse.quote(text, safe="")


def _exclude_component(options: Iterable[ExcludeOption]) -> str:
    # Duplicates collapse, first occurrence wins the position
    values = dict.fromkeys(ExcludeOption(option).value for option in options)
    return ",".join(values)


def _bool_component(value: bool) -> str:
    return "true" if value else "false"


def encode_option(option: RequestOption) -> str:
    """Render a single option as ``key=value``."""
    if isinstance(option, PageSize):
        return f"pageSize={int(option.size)}"
    if isinstance(option, PageNumber):
        return f"pageNumber={int(option.number)}"
    if isinstance(option, Sort):
        return "sorter=" + _json_component([s.to_dict() for s in option.sorters])
    if isinstance(option, Filters):
        return "filter=" + _json_component([f.to_dict() for f in option.filters])
    if isinstance(option, Exclude):
        return "exclude=" + _exclude_component(option.options)
    if isinstance(option, Deep):
        return "deep=" + _bool_component(option.enabled)
    if isinstance(option, RelatedObjects):
        return "relatedObjects=" + _bool_component(option.enabled)
    if isinstance(option, ReturnObject):
        return "returnObject=" + _bool_component(option.enabled)
    if isinstance(option, Search):
        # Sent as-is, callers encode the text themselves if needed
        return f"search={option.text}"
    raise TypeError(f"Unsupported request option: {option!r}")


def encode_options(options: Iterable[RequestOption]) -> str:
    """
    Convert request options into a query string.

    Args:
        options: Request options, in wire order

    Returns:
        ``"?"`` followed by the ``&``-joined options (a bare ``"?"`` when empty)

    Raises:
        TypeError: On an unknown option or a filter value JSON cannot encode

    """
    return "?" + "&".join(encode_option(option) for option in options)
