import asyncio
import subprocess

import pytest

from nightswitch.common.exceptions import DesktopError
from nightswitch.desktop import gsettings
from nightswitch.desktop.gsettings import GSettingsStore, parse_gvariant_string, parse_monitor_line
from nightswitch.schedule.models import TimeState

SCHEMA = "org.gnome.desktop.interface"


class FakeRunner:
    def __init__(self):
        self.calls = []

    async def __call__(self, argv):
        self.calls.append(argv)
        return 0


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def store(scheduler, runner):
    return GSettingsStore(scheduler, SCHEMA, runner=runner)


def test_parse_gvariant_string():
    assert parse_gvariant_string("'Adwaita-dark'\n") == "Adwaita-dark"
    assert parse_gvariant_string('"prefer-dark"') == "prefer-dark"
    assert parse_gvariant_string("'It\\'s'") == "It's"
    assert parse_gvariant_string("default") == "default"


def test_parse_monitor_line():
    assert parse_monitor_line("color-scheme: 'prefer-dark'\n") == ("color-scheme", "prefer-dark")
    assert parse_monitor_line("garbage") is None


def test_local_write_is_pushed_with_gsettings_set(store, scheduler, runner):
    seen = []
    store.connect("color-scheme", seen.append)
    store.set("color-scheme", "prefer-dark")
    assert seen == ["color-scheme"]
    assert scheduler.run_tasks() == 1
    assert runner.calls == [["gsettings", "set", SCHEMA, "color-scheme", "prefer-dark"]]


def test_external_change_notifies_without_writing_back(store, scheduler, runner):
    seen = []
    store.connect("gtk-theme", seen.append)
    store.apply_external("gtk-theme", "Adwaita-dark")
    assert store.get("gtk-theme") == "Adwaita-dark"
    assert seen == ["gtk-theme"]
    assert scheduler.run_tasks() == 0

    # The monitor echo of a local write is a no-op.
    store.set("color-scheme", "prefer-dark")
    store.apply_external("color-scheme", "prefer-dark")
    assert scheduler.run_tasks() == 1


def test_external_invalid_or_unknown_values_are_ignored(store):
    store.apply_external("color-scheme", "purple")
    store.apply_external("font-name", "Cantarell 11")
    assert store.get("color-scheme") == "default"


def test_load_reads_every_key(store, monkeypatch):
    values = {
        "color-scheme": "'prefer-dark'\n",
        "gtk-theme": "'Yaru'\n",
        "icon-theme": "'Papirus'\n",
        "cursor-theme": "'DMZ-White'\n",
    }

    def fake_run(argv, **kwargs):
        assert argv[:3] == ["gsettings", "get", SCHEMA]
        return subprocess.CompletedProcess(argv, 0, stdout=values[argv[3]])

    monkeypatch.setattr(gsettings.subprocess, "run", fake_run)
    store.load()
    assert store.get("color-scheme") == "prefer-dark"
    assert store.get("cursor-theme") == "DMZ-White"


def test_load_failure_raises_desktop_error(store, monkeypatch):
    def fake_run(argv, **kwargs):
        raise subprocess.CalledProcessError(1, argv)

    monkeypatch.setattr(gsettings.subprocess, "run", fake_run)
    with pytest.raises(DesktopError):
        store.load()


def test_monitor_applies_changes(store, scheduler, monkeypatch):
    lines = [b"color-scheme: 'prefer-dark'\n", b"\n", b"gtk-theme: 'Adwaita-dark'\n"]

    async def stdout():
        for line in lines:
            yield line

    class FakeProcess:
        returncode = 0

        def __init__(self):
            self.stdout = stdout()

    launched = []

    async def fake_exec(*argv, **kwargs):
        launched.append(argv)
        return FakeProcess()

    monkeypatch.setattr(gsettings.asyncio, "create_subprocess_exec", fake_exec)
    asyncio.run(store.monitor())
    assert launched == [("gsettings", "monitor", SCHEMA)]
    assert store.get("color-scheme") == "prefer-dark"
    assert store.get("gtk-theme") == "Adwaita-dark"
    assert scheduler.run_tasks() == 0


def test_writes_are_sent_in_order_by_one_writer(store, scheduler, runner):
    store.set("color-scheme", "prefer-dark")
    store.set("gtk-theme", "Adwaita-dark")
    store.set("color-scheme", "default")
    assert scheduler.run_tasks() == 1
    assert [call[3:] for call in runner.calls] == [
        ["color-scheme", "prefer-dark"],
        ["gtk-theme", "Adwaita-dark"],
        ["color-scheme", "default"],
    ]

    store.set("color-scheme", "prefer-light")
    assert scheduler.run_tasks() == 1
    assert runner.calls[-1][3:] == ["color-scheme", "prefer-light"]


def test_late_echoes_of_quick_toggles_are_not_overrides(store, scheduler, runner, make_timer):
    timer, _, _, emitted = make_timer(manual_schedule=True, sunrise=7.0, sunset=19.0, interface=store)
    timer.enable()
    timer.toggle()
    timer.toggle()
    store.apply_external("color-scheme", "prefer-dark")
    store.apply_external("color-scheme", "default")
    assert emitted == [TimeState.DAY, TimeState.NIGHT, TimeState.DAY]

    scheduler.run_tasks()
    assert runner.calls[-1][3:] == ["color-scheme", "default"]

    # A change made by the user afterwards still counts.
    store.apply_external("color-scheme", "prefer-dark")
    assert timer.time is TimeState.NIGHT
    assert timer.manually_set
    timer.disable()


def test_failed_write_leaves_no_pending_echo(scheduler):
    async def failing(argv):
        raise DesktopError("gsettings missing")

    store = GSettingsStore(scheduler, SCHEMA, runner=failing)
    store.set("color-scheme", "prefer-dark")
    scheduler.run_tasks()
    store.set("color-scheme", "default")
    store.apply_external("color-scheme", "prefer-dark")
    assert store.get("color-scheme") == "prefer-dark"
