from session.credentials import Credential, Role
from session.observer import SessionExpiryHandler, SessionObserver


def test_emit_reaches_every_listener(observer):
    seen = []
    observer.subscribe(lambda reason: seen.append(("a", reason)))
    observer.subscribe(lambda reason: seen.append(("b", reason)))

    observer.emit("token rejected")

    assert seen == [("a", "token rejected"), ("b", "token rejected")]


def test_failing_listener_does_not_stop_the_others(observer):
    seen = []

    def broken(reason):
        raise RuntimeError("boom")

    observer.subscribe(broken)
    observer.subscribe(seen.append)

    observer.emit()

    assert seen == ["Session expired"]


def test_unsubscribe(observer):
    seen = []
    unsubscribe = observer.subscribe(seen.append)
    assert len(observer) == 1

    unsubscribe()
    unsubscribe()
    observer.emit("ignored")

    assert seen == []
    assert len(observer) == 0


def test_repeated_expiry_logs_out_once(observer, credential_store):
    credential_store.save(Credential(Role.OWNER, "owner"))
    credential_store.save(Credential(Role.DRIVER, "driver"))
    logouts = []
    signals = []
    handler = SessionExpiryHandler(credential_store, on_logged_out=logouts.append)
    observer.subscribe(handler)
    observer.subscribe(signals.append)

    for _ in range(5):
        observer.emit("owner session expired")

    assert len(signals) == 5
    assert logouts == ["owner session expired"]
    assert handler.logged_out
    assert credential_store.roles() == []


def test_handler_rearms_after_sign_in(observer, credential_store):
    logouts = []
    handler = SessionExpiryHandler(credential_store, on_logged_out=logouts.append)
    observer.subscribe(handler)

    observer.emit("first")
    handler.arm()
    observer.emit("second")
    observer.emit("third")

    assert logouts == ["first", "second"]
