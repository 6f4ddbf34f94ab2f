from __future__ import annotations

from pathlib import Path

import pytest

from testadura.core import privileges
from tests.utils import CapturedMessenger, write_file


@pytest.fixture()
def messenger() -> CapturedMessenger:
    return CapturedMessenger()


@pytest.fixture()
def workspace(tmp_path: Path) -> Path:
    """A small source tree covering eligible and ineligible files."""
    source = tmp_path / "workspace"
    write_file(source, "README.md", "# workspace\n")
    write_file(source, "etc/testadura/app.cfg", "answer=42\n")
    write_file(source, "etc/testadura/app.cfg.old", "answer=41\n")
    write_file(source, "usr/local/lib/testadura/common/tools/deploy-workspace.sh", "#!/bin/sh\n", 0o755)
    write_file(source, "usr/local/lib/testadura/lib.sh", "helper() { :; }\n")
    write_file(source, "usr/local/lib/testadura/_draft.sh", "draft\n")
    write_file(source, "usr/_wip/tool", "wip\n")
    write_file(source, ".git/config", "[core]\n")
    return source


@pytest.fixture()
def target(tmp_path: Path) -> Path:
    root = tmp_path / "target"
    root.mkdir()
    return root


@pytest.fixture()
def as_root(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(privileges, "is_root", lambda: True)


@pytest.fixture()
def as_user(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(privileges, "is_root", lambda: False)
