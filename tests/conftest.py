"""
Shared fixtures for the texlaunch test suite.

Resolvers are exercised against a fake host and a fake release client so
that no test depends on the machine's PATH or on the network.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from fakes import FakeEnvironment, FakeReleaseClient


@pytest.fixture
def fake_env() -> FakeEnvironment:
    return FakeEnvironment()


@pytest.fixture
def fake_client() -> FakeReleaseClient:
    return FakeReleaseClient()


@pytest.fixture
def work_dir(tmp_path) -> Path:
    d = tmp_path / "work"
    d.mkdir()
    return d


@pytest.fixture
def statuses() -> list:
    """Collects installation-status reports; pass ``statuses.append`` as sink."""
    return []
