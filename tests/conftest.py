"""Shared fixtures for reg-inspector tests."""

import logging
from pathlib import Path

import pytest
import yaml


SAMPLE_SNAPSHOT = {
    "HKEY_LOCAL_MACHINE": {
        "SOFTWARE": {
            "Vendor": {
                "_values": {
                    "Version": {"type": "REG_SZ", "data": "1.0"},
                    "Enabled": {"type": "REG_DWORD", "data": 1},
                },
                "TEST": {
                    "Settings": {},
                },
                "Plugins": {
                    "TESTING": {},
                },
            },
            "TEST": {},
            "Locked": {
                "_denied": True,
                "TEST": {},
            },
        },
        "SYSTEM": {},
    },
    "HKEY_CURRENT_USER": {
        "Empty": {},
    },
}


@pytest.fixture
def sample_store():
    """An in-memory store built from SAMPLE_SNAPSHOT."""
    from reg_inspector.store import MemoryStore

    return MemoryStore.from_mapping(SAMPLE_SNAPSHOT)


@pytest.fixture
def snapshot_file(tmp_path) -> Path:
    """SAMPLE_SNAPSHOT written to a YAML file."""
    path = tmp_path / "registry.yaml"
    path.write_text(yaml.safe_dump(SAMPLE_SNAPSHOT, sort_keys=False))
    return path


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep user config and REG_INSPECTOR_* variables out of tests."""
    import os

    for name in list(os.environ):
        if name.startswith("REG_INSPECTOR_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("REG_INSPECTOR_CONFIG", str(tmp_path / "no-config.yaml"))
    yield
    # CLI runs bind a handler to a captured stream
    logging.getLogger("reg_inspector").handlers.clear()
