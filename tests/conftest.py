"""Pytest configuration and shared fixtures for render-redact tests."""

from __future__ import annotations

import pytest

from render_redact import Marshaller
from render_redact.config.settings import _ENV_OPTIONS


def stub_pointer_renderer(writer, ident: int) -> None:
    """Write a fixed address so handle renderings are deterministic."""
    writer.write("PTR")


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep tests away from the real home directory and RENDER_REDACT_* variables."""
    for env_var in _ENV_OPTIONS:
        monkeypatch.delenv(env_var, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path


@pytest.fixture
def marshaller() -> Marshaller:
    """Create a marshaller with a deterministic pointer renderer."""
    return Marshaller(pointer_renderer=stub_pointer_renderer)
