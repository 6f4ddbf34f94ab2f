from __future__ import annotations

import pytest

from testadura.deploy.filters import is_eligible


@pytest.mark.parametrize(
    "relative_path",
    [
        "README",
        "notes.txt",
        "usr/bin/_draft",
        "etc/app.cfg.old",
        ".git/config",
        "usr/.cache/tool",
        "usr/_wip/tool",
        "_private/etc/app.cfg",
    ],
)
def test_ineligible(relative_path):
    assert not is_eligible(relative_path)


@pytest.mark.parametrize(
    "relative_path",
    [
        "etc/testadura/app.cfg",
        "usr/local/bin/tool",
        "usr/local/lib/testadura/common/core.sh",
        "etc/skel/.bashrc",
        "etc/app.old.cfg",
    ],
)
def test_eligible(relative_path):
    assert is_eligible(relative_path)
