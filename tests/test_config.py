# tests/test_config.py

import pytest
from pydantic import ValidationError

from voicerag.config import Settings


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.chunk_size == 500
    assert settings.chunk_overlap == 100
    assert settings.default_top_k == 5
    assert settings.replace_on_reingest is True


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("VOICERAG_CHUNK_SIZE", "800")
    monkeypatch.setenv("VOICERAG_LOG_LEVEL", "debug")

    settings = Settings(_env_file=None)

    assert settings.chunk_size == 800
    assert settings.log_level == "DEBUG"


def test_overlap_must_be_smaller_than_chunk_size():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, chunk_size=100, chunk_overlap=100)


def test_unknown_log_level_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, log_level="LOUD")
