import time

from conftest import NOW, make_token
from core.session_manager import SessionStore, decode_token_expiry
from core.settings_storage import ROLE_KEY, TOKEN_KEY
from models.user import Role


def test_missing_token_is_expired(session):
    assert session.is_expired()
    assert not session.is_valid()


def test_malformed_tokens_are_expired(session):
    for token in ("garbage", "a.!!!.c", "a..c", make_token(exp=None), make_token(exp="tomorrow")):
        session.login(token, Role.CHEF)
        assert session.is_expired(), token


def test_past_expiry_is_expired(session):
    session.login(make_token(exp=NOW - 1), Role.CHEF)
    assert session.is_expired()


def test_future_expiry_is_valid(session):
    session.login(make_token(exp=NOW + 60), Role.CHEF)
    assert not session.is_expired()
    assert session.is_valid()


def test_decode_token_expiry_reads_exp_claim():
    assert decode_token_expiry(make_token(exp=NOW + 5, sub=3)) == NOW + 5
    assert decode_token_expiry(None) is None


def test_login_persists_token_and_role(session, storage):
    token = make_token()
    session.login(token, "2")
    assert storage.get(TOKEN_KEY) == token
    assert session.role == Role.WAITER
    assert session.has_role(Role.WAITER)


def test_login_without_role_clears_stored_role(session, storage):
    session.login(make_token(), Role.ADMIN)
    session.login(make_token())
    assert storage.get(ROLE_KEY) is None
    assert session.role is None
    assert session.is_authenticated


def test_logout_clears_storage_and_notifies(session, storage):
    calls = []
    session.on_logout(lambda: calls.append("out"))
    session.login(make_token(), Role.POS_ADMIN)
    session.logout()
    assert storage.get(TOKEN_KEY) is None
    assert storage.get(ROLE_KEY) is None
    assert calls == ["out"]


def test_disposed_logout_listener_is_not_called(session):
    calls = []
    subscription = session.on_logout(lambda: calls.append("out"))
    subscription.dispose()
    session.logout()
    assert calls == []


def test_restore_drops_expired_token(storage):
    SessionStore(storage, clock=lambda: NOW).login(make_token(exp=NOW - 10), Role.CHEF)
    restored = SessionStore(storage, clock=lambda: NOW)
    assert restored.restore() is False
    assert restored.token is None


def test_restore_keeps_valid_token(storage):
    SessionStore(storage, clock=lambda: NOW).login(make_token(), Role.CHEF)
    restored = SessionStore(storage, clock=lambda: NOW)
    assert restored.restore() is True
    assert restored.role == Role.CHEF


def test_monitor_logs_out_when_token_lapses(storage):
    clock = {"now": NOW}
    session = SessionStore(storage, clock=lambda: clock["now"], check_interval=0.01)
    logged_out = []
    session.on_logout(lambda: logged_out.append(True))
    session.login(make_token(exp=NOW + 30), Role.CHEF)
    session.start_monitor()
    assert session.monitor_active

    clock["now"] = NOW + 31
    deadline = time.time() + 2
    while session.is_authenticated and time.time() < deadline:
        time.sleep(0.01)

    assert not session.is_authenticated
    assert logged_out == [True]


def test_only_one_monitor_thread(session):
    session.login(make_token(), Role.CHEF)
    session.start_monitor()
    first = session._monitor_thread
    session.start_monitor()
    assert session._monitor_thread is first
    session.stop_monitor()
    assert not session.monitor_active
