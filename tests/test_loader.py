import pytest

from nightswitch.common.exceptions import ConfigError
from nightswitch.config.loader import load_settings, resolve_path, save_settings
from nightswitch.config.models import AppSettings


def test_missing_file_gives_defaults(tmp_path):
    settings = load_settings(tmp_path / "absent.yaml")
    assert settings == AppSettings()
    assert settings.time.sunrise == 6.0
    assert settings.desktop.backend == "gsettings"


def test_partial_file_keeps_other_defaults(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text(
        "time:\n"
        "  manual_schedule: true\n"
        "  sunrise: 7.5\n"
        "  location: [48.85, 2.35]\n"
        "gtk_variants:\n"
        "  enabled: true\n"
        "  night: Adwaita-dark\n"
    )
    settings = load_settings(path)
    assert settings.time.manual_schedule is True
    assert settings.time.sunrise == 7.5
    assert settings.time.sunset == 20.0
    assert settings.time.location == (48.85, 2.35)
    assert settings.gtk_variants.night == "Adwaita-dark"


@pytest.mark.parametrize(
    "content",
    [
        "time: [unclosed\n",
        "time:\n  sunset: 24\n",
        "time:\n  location: [95, 0]\n",
        "desktop:\n  backend: kde\n",
        "- just\n- a list\n",
    ],
)
def test_invalid_files_raise_config_error(tmp_path, content):
    path = tmp_path / "settings.yaml"
    path.write_text(content)
    with pytest.raises(ConfigError):
        load_settings(path)


def test_saved_settings_load_back(tmp_path):
    edited = AppSettings(time={"offset": 0.5, "location": (51.5, -0.13)}, commands={"sunset": "echo night"})
    path = save_settings(edited, tmp_path / "nested" / "settings.yaml")
    assert path.exists()
    assert load_settings(path) == edited


def test_resolve_path_expands_home_and_env(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("NS_DIR", "conf")
    assert resolve_path("~/$NS_DIR/settings.yaml") == tmp_path / "conf" / "settings.yaml"
