"""Shared names and filesystem layout constants for the Testadura framework."""

from __future__ import annotations

FRAMEWORK_NAME = "testadura"
LINK_PREFIX = "td-"

# Relative to a target root.
FRAMEWORK_LIB_DIR = f"usr/local/lib/{FRAMEWORK_NAME}"
SHARED_BIN_DIR = "usr/local/bin"
COMMON_LIB_DIR = f"{FRAMEWORK_LIB_DIR}/common"

# A source root is expected to carry at least one of these at its top.
EXPECTED_SOURCE_SUBTREES = ("etc", "usr")

__all__ = [
    "COMMON_LIB_DIR",
    "EXPECTED_SOURCE_SUBTREES",
    "FRAMEWORK_LIB_DIR",
    "FRAMEWORK_NAME",
    "LINK_PREFIX",
    "SHARED_BIN_DIR",
]
