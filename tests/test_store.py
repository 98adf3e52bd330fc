import pytest

from nightswitch.common.exceptions import SettingsError
from nightswitch.common.signals import Signal
from nightswitch.config.models import TimeSettings
from nightswitch.config.store import SettingsStore


def _store(**values):
    return SettingsStore(TimeSettings(**values), name="time")


def test_hyphenated_keys_map_to_fields():
    store = _store(manual_schedule=True, sunrise=7.0)
    assert store.get("manual-schedule") is True
    assert store.get("sunrise") == 7.0
    assert "nightthemeswitcher-ondemand-keybinding" in store.keys()


def test_set_notifies_only_on_change():
    store = _store()
    seen = []
    store.connect("offset", seen.append)
    store.set("offset", 0.5)
    store.set("offset", 0.5)
    assert seen == ["offset"]
    assert store.get("offset") == 0.5


def test_out_of_range_values_are_rejected():
    store = _store()
    with pytest.raises(SettingsError):
        store.set("sunrise", 24.0)
    with pytest.raises(SettingsError):
        store.set("location", (91.0, 0.0))
    assert store.get("sunrise") == 6.0
    assert store.get("location") is None


def test_update_notifies_after_all_values_applied():
    store = _store(sunrise=6.0, sunset=20.0)
    observed = []
    store.connect("sunrise", lambda key: observed.append((store.get("sunrise"), store.get("sunset"))))
    changed = store.update({"sunrise": 5.5, "sunset": 21.5})
    assert changed == ["sunrise", "sunset"]
    assert observed == [(5.5, 21.5)]


def test_connect_any_receives_changed_keys():
    store = _store()
    batches = []
    store.connect_any(batches.append)
    store.update({"sunrise": 5.0, "offset": 0.0})
    assert batches == [["sunrise"]]


def test_unknown_key():
    store = _store()
    with pytest.raises(KeyError):
        store.get("colour")
    with pytest.raises(KeyError):
        store.connect("colour", print)


def test_dispose_is_idempotent():
    store = _store()
    seen = []
    sub = store.connect("offset", seen.append)
    sub.dispose()
    sub.dispose()
    store.set("offset", 1.0)
    assert seen == []
    assert store.subscriber_count() == 0


def test_failing_subscriber_does_not_stop_delivery():
    signal = Signal("test")
    seen = []

    def broken(value):
        raise RuntimeError("boom")

    signal.connect(broken)
    signal.connect(seen.append)
    signal.emit("night")
    assert seen == ["night"]


def test_subscriber_disposed_during_emit_is_skipped():
    signal = Signal("test")
    seen = []
    second = None

    def first(value):
        second.dispose()

    signal.connect(first)
    second = signal.connect(seen.append)
    signal.emit("day")
    assert seen == []
