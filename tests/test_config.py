import logging

import pytest

from nodepatch.config import PatchLimits, get_log_level, get_patch_limits
from nodepatch.utils.logging import configure_logging


def test_default_limits(monkeypatch):
    monkeypatch.delenv("NODEPATCH_MAX_PATCHES", raising=False)
    monkeypatch.delenv("NODEPATCH_MAX_PATCH_BYTES", raising=False)
    assert get_patch_limits() == PatchLimits(max_patches=10, max_patch_bytes=1024)


def test_limits_from_env(monkeypatch):
    monkeypatch.setenv("NODEPATCH_MAX_PATCHES", "3")
    monkeypatch.setenv("NODEPATCH_MAX_PATCH_BYTES", "4096")
    assert get_patch_limits() == PatchLimits(max_patches=3, max_patch_bytes=4096)


@pytest.mark.parametrize("raw", ["ten", "-1"])
def test_invalid_limit_raises(monkeypatch, raw):
    monkeypatch.setenv("NODEPATCH_MAX_PATCHES", raw)
    with pytest.raises(ValueError, match="NODEPATCH_MAX_PATCHES"):
        get_patch_limits()


def test_log_level(monkeypatch):
    monkeypatch.setenv("NODEPATCH_LOG_LEVEL", "debug")
    assert get_log_level() == "DEBUG"
    monkeypatch.delenv("NODEPATCH_LOG_LEVEL")
    assert get_log_level() == "INFO"


def test_configure_logging_uses_configured_level(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))
    monkeypatch.setenv("NODEPATCH_LOG_LEVEL", "debug")

    configure_logging()
    configure_logging(logging.WARNING, force=True)

    assert [(c["level"], c["force"]) for c in calls] == [("DEBUG", False), (logging.WARNING, True)]
