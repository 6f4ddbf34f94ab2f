from __future__ import annotations

from pathlib import Path

from testadura.core import paths
from testadura.core.paths import FrameworkPaths


def test_conventional_locations(monkeypatch):
    for name in ("TD_FRAMEWORK_ROOT", "TD_APPLICATION_ROOT", "TD_COMMON_LIB", "TD_STATE_FILE", "TD_CFG_FILE"):
        monkeypatch.delenv(name, raising=False)

    located = FrameworkPaths.for_script("deploy-workspace")

    assert located.framework_root == Path("/")
    assert located.common_lib == Path("/usr/local/lib/testadura/common")
    assert located.state_file == Path("/var/testadura/deploy-workspace.state")
    assert located.cfg_file == Path("/etc/testadura/deploy-workspace.cfg")


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("TD_FRAMEWORK_ROOT", str(tmp_path / "fw"))
    monkeypatch.setenv("TD_APPLICATION_ROOT", str(tmp_path / "app"))
    monkeypatch.setenv("TD_STATE_FILE", str(tmp_path / "custom.state"))
    monkeypatch.delenv("TD_COMMON_LIB", raising=False)
    monkeypatch.delenv("TD_CFG_FILE", raising=False)

    located = FrameworkPaths.for_script("deploy-workspace")

    assert located.common_lib == tmp_path / "fw/usr/local/lib/testadura/common"
    assert located.state_file == tmp_path / "custom.state"
    assert located.cfg_file == tmp_path / "app/etc/testadura/deploy-workspace.cfg"


def test_invoking_user_home_prefers_sudo_user(monkeypatch):
    class Entry:
        pw_dir = "/home/developer"

    looked_up = []

    def fake_getpwnam(name):
        looked_up.append(name)
        return Entry()

    monkeypatch.setenv("SUDO_USER", "developer")
    monkeypatch.setattr(paths.pwd, "getpwnam", fake_getpwnam)

    assert paths.get_invoking_user_home() == Path("/home/developer")
    assert looked_up == ["developer"]


def test_unknown_user_falls_back_to_home(monkeypatch, tmp_path):
    def missing(name):
        raise KeyError(name)

    monkeypatch.setenv("SUDO_USER", "ghost")
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setattr(paths.pwd, "getpwnam", missing)

    assert paths.get_invoking_user_home() == tmp_path
