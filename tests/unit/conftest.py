"""
Unit test configuration for claudy.

Keeps tests away from the user's real config file and CLAUDY_* settings,
and undoes any logging setup a previous test performed.
"""

import logging
import os

import pytest

from claudy import config


def _reset_claudy_logger():
    logger = logging.getLogger("claudy")
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def reset_claudy_logger():
    return _reset_claudy_logger


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point config at a non-existent file and clear CLAUDY_* env vars."""
    monkeypatch.setattr(config, "CONFIG_PATH", tmp_path / "claudy-state" / "config.yaml")
    for key in list(os.environ):
        if key.startswith("CLAUDY_"):
            monkeypatch.delenv(key, raising=False)
    _reset_claudy_logger()
    yield
    _reset_claudy_logger()
