"""Tests for session state, credential headers and secret stores."""

import json
import os
import stat

from backand_cli.core.auth import USER_TOKEN_KEY, Session
from backand_cli.core.store import FileStore, MemoryStore
from backand_cli.core.types import AuthMode

# =============================================================================
# Headers
# =============================================================================


def test_new_session_is_anonymous(session):
    assert session.mode == AuthMode.ANONYMOUS
    assert session.headers() == {"AnonymousToken": "anon-123", "AppName": "todos"}


def test_credential_header_comes_before_app_name(session):
    assert list(session.headers()) == ["AnonymousToken", "AppName"]


def test_base_url_trailing_slash_is_stripped(session):
    assert session.base_url == "https://api.example.test"


def test_sign_up_mode_uses_sign_up_token(session):
    session.begin_sign_up()
    assert session.headers() == {"SignUpToken": "signup-456", "AppName": "todos"}


def test_user_mode_uses_bearer_token(session):
    session.set_user_token("tok")
    session.set_mode(AuthMode.USER)
    assert session.headers() == {"Authorization": "Bearer tok", "AppName": "todos"}


def test_user_mode_without_token_sends_empty_bearer(session):
    session.set_mode(AuthMode.USER)
    assert session.headers()["Authorization"] == "Bearer "


def test_missing_configuration_leaves_headers_out():
    session = Session()
    assert session.headers() == {}
    session.begin_sign_up()
    assert session.headers() == {}


# =============================================================================
# Transitions
# =============================================================================


def test_sign_in_stores_token_and_switches_to_user(session, store):
    assert session.complete_sign_in({"access_token": "abc", "token_type": "bearer"})
    assert store.get(USER_TOKEN_KEY) == "abc"
    assert session.mode == AuthMode.USER
    assert session.headers()["Authorization"] == "Bearer abc"


def test_sign_in_without_token_leaves_mode(session):
    assert not session.complete_sign_in({"error": "nope"})
    assert not session.complete_sign_in(None)
    assert session.mode == AuthMode.ANONYMOUS
    assert not session.user_signed_in()


def test_sign_up_with_auto_sign_in(session):
    session.begin_sign_up()
    assert session.complete_sign_up({"token": "xyz"}, sign_in_after_sign_up=True)
    assert session.mode == AuthMode.USER
    assert session.get_user_token() == "xyz"


def test_sign_up_without_auto_sign_in_stays_pending(session):
    session.begin_sign_up()
    assert not session.complete_sign_up({"token": "xyz"}, sign_in_after_sign_up=False)
    assert session.mode == AuthMode.SIGN_UP
    assert session.get_user_token() is None


def test_sign_up_without_token_stays_pending(session):
    session.begin_sign_up()
    assert not session.complete_sign_up({"message": "check your email"}, sign_in_after_sign_up=True)
    assert session.mode == AuthMode.SIGN_UP


def test_sign_up_starts_pending_from_any_mode(session):
    session.set_mode(AuthMode.USER)
    session.begin_sign_up()
    assert session.mode == AuthMode.SIGN_UP


def test_sign_out_clears_token_and_resets_mode(session, store):
    session.complete_sign_in({"access_token": "abc"})
    session.sign_out()
    assert store.get(USER_TOKEN_KEY) is None
    assert session.mode == AuthMode.ANONYMOUS
    assert session.headers() == {"AnonymousToken": "anon-123", "AppName": "todos"}


def test_sign_out_is_unconditional(session):
    session.begin_sign_up()
    session.sign_out()
    assert session.mode == AuthMode.ANONYMOUS


def test_user_signed_in_follows_store_not_mode(session, store):
    store.set(USER_TOKEN_KEY, "persisted")
    assert session.mode == AuthMode.ANONYMOUS
    assert session.user_signed_in()


def test_token_is_read_through_the_store(session, store):
    session.set_mode(AuthMode.USER)
    store.set(USER_TOKEN_KEY, "first")
    assert session.headers()["Authorization"] == "Bearer first"
    store.set(USER_TOKEN_KEY, "second")
    assert session.headers()["Authorization"] == "Bearer second"


# =============================================================================
# Stores
# =============================================================================


def test_memory_store():
    store = MemoryStore({"a": "1"})
    assert store.get("a") == "1"
    store.set("b", "2")
    store.remove("a")
    store.remove("missing")
    assert store.get("a") is None
    assert store.get("b") == "2"


def test_file_store_survives_new_instances(tmp_path):
    path = tmp_path / "nested" / "credentials.json"
    FileStore(path).set(USER_TOKEN_KEY, "abc")

    assert FileStore(path).get(USER_TOKEN_KEY) == "abc"
    assert json.loads(path.read_text()) == {USER_TOKEN_KEY: "abc"}


def test_file_store_is_owner_only(tmp_path):
    path = tmp_path / "credentials.json"
    FileStore(path).set("k", "v")
    assert stat.S_IMODE(os.stat(path).st_mode) == 0o600


def test_file_store_remove(tmp_path):
    path = tmp_path / "credentials.json"
    store = FileStore(path)
    store.set("k", "v")
    store.remove("k")
    assert store.get("k") is None
    assert json.loads(path.read_text()) == {}


def test_file_store_missing_or_corrupt_file(tmp_path):
    path = tmp_path / "credentials.json"
    assert FileStore(path).get("k") is None
    path.write_text("not json")
    assert FileStore(path).get("k") is None


def test_file_store_path_from_environment(tmp_path, monkeypatch):
    path = tmp_path / "env-credentials.json"
    monkeypatch.setenv("BACKAND_CREDENTIALS_FILE", str(path))
    assert FileStore().path == path


def test_session_persists_sign_in_across_restarts(tmp_path):
    path = tmp_path / "credentials.json"
    first = Session(app_name="todos", store=FileStore(path))
    first.complete_sign_in({"access_token": "abc"})

    restarted = Session(app_name="todos", store=FileStore(path))
    assert restarted.user_signed_in()
    assert restarted.mode == AuthMode.ANONYMOUS
