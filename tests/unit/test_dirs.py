import sys

import pytest

from src.config import settings
from src.core.dirs import resolve_data_dir
from src.core.errors import DirectoryResolutionError


@pytest.fixture(autouse=True)
def no_override(monkeypatch):
    monkeypatch.setattr(settings, "SERDER_DATA_DIR", "")


def test_linux_uses_xdg_data_home(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    # Nom en minuscules, espaces supprimés (convention XDG)
    assert resolve_data_dir("Eule Test") == (tmp_path / "euletest").resolve()


def test_linux_falls_back_to_local_share(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.delenv("XDG_DATA_HOME", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))

    assert resolve_data_dir("acme") == (tmp_path / ".local" / "share" / "acme").resolve()


def test_relative_xdg_data_home_is_ignored(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setenv("XDG_DATA_HOME", "relative/dir")
    monkeypatch.setenv("HOME", str(tmp_path))

    assert resolve_data_dir("acme") == (tmp_path / ".local" / "share" / "acme").resolve()


def test_macos_application_support(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "platform", "darwin")
    monkeypatch.setenv("HOME", str(tmp_path))

    expected = tmp_path / "Library" / "Application Support" / "Acme"
    assert resolve_data_dir("Acme") == expected.resolve()


def test_windows_appdata(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "platform", "win32")
    monkeypatch.setenv("APPDATA", str(tmp_path))

    assert resolve_data_dir("Acme") == (tmp_path / "Acme" / "data").resolve()


def test_data_dir_override(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "SERDER_DATA_DIR", str(tmp_path))

    assert resolve_data_dir("Acme") == (tmp_path / "Acme").resolve()


@pytest.mark.parametrize("name", ["", "   ", "..", "a/b", "a\\b"])
def test_unusable_names_rejected(name):
    with pytest.raises(DirectoryResolutionError):
        resolve_data_dir(name)
