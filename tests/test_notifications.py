from core.notifications import ERROR, LOADING, SUCCESS, Notifier


def test_same_key_replaces_previous_notification():
    shown = []
    notifier = Notifier(clock=lambda: 0.0)
    notifier.attach(shown.append)

    notifier.loading("socket-reconnection", "Reconnecting to server...")
    notifier.success("socket-reconnection", "Reconnected successfully")

    active = notifier.active()
    assert len(active) == 1
    assert active[0].level == SUCCESS
    assert [n.level for n in shown] == [LOADING, SUCCESS]


def test_different_keys_stack():
    notifier = Notifier(clock=lambda: 0.0)
    notifier.error("socket-disconnection", "lost")
    notifier.error("socket-connection-error", "error")
    assert {n.key for n in notifier.active()} == {"socket-disconnection", "socket-connection-error"}


def test_notifications_expire_after_duration():
    now = {"t": 0.0}
    notifier = Notifier(clock=lambda: now["t"])
    notifier.notify("a", "short", ERROR, duration=2.0)
    notifier.loading("b", "sticky")
    now["t"] = 5.0
    assert [n.key for n in notifier.active()] == ["b"]


def test_dismiss_and_detached_sink():
    shown = []
    notifier = Notifier(clock=lambda: 0.0)
    subscription = notifier.attach(shown.append)
    notifier.info("a", "hello")
    notifier.dismiss("a")
    subscription.dispose()
    notifier.info("b", "again")
    assert notifier.active()[0].key == "b"
    assert len(shown) == 1


def test_failing_sink_does_not_block_others():
    shown = []
    notifier = Notifier(clock=lambda: 0.0)

    def broken(note):
        raise RuntimeError("render failed")

    notifier.attach(broken)
    notifier.attach(shown.append)
    notifier.info("a", "hello")
    assert len(shown) == 1
