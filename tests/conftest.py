"""Shared test fixtures."""

from __future__ import annotations

import os

import pytest


@pytest.fixture()
def clean_env(monkeypatch):
    """Drop RANDOOP_RUNNER_* variables inherited from the developer shell."""

    for name in list(os.environ):
        if name.startswith("RANDOOP_RUNNER_"):
            monkeypatch.delenv(name, raising=False)
