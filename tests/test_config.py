import json

import pytest
from pydantic import ValidationError

from advisor_scraper.config import DEFAULT_SOURCES, HEADLESS_ENV, load_config
from advisor_scraper.errors import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv(HEADLESS_ENV, raising=False)


def _write(tmp_path, payload):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(payload))
    return str(path)


def test_defaults():
    config = load_config()

    assert list(config.sources) == list(DEFAULT_SOURCES)
    assert config.enabled_sources == ["edward_jones", "ameriprise", "stifel", "schwab", "lpl"]
    assert config.headless is True
    assert config.merge_key == "name"
    assert config.sources["schwab"].timeout_ms == 60_000
    assert all(s.max_retries == 5 for s in config.sources.values())


def test_file_overrides(tmp_path):
    path = _write(tmp_path, {
        "headless": False,
        "merge_key": "name_phone",
        "sources": {"lpl": {"enabled": False}, "janney": {"enabled": True, "concurrency_limit": 32}},
    })

    config = load_config(path)

    assert config.headless is False
    assert config.merge_key == "name_phone"
    assert not config.sources["lpl"].enabled
    assert config.sources["lpl"].concurrency_limit == DEFAULT_SOURCES["lpl"].concurrency_limit
    assert config.sources["janney"].enabled
    assert config.sources["janney"].concurrency_limit == 32


def test_environment_overrides_headless(monkeypatch):
    monkeypatch.setenv(HEADLESS_ENV, "false")
    assert load_config().headless is False


def test_unknown_source(tmp_path):
    with pytest.raises(ConfigError, match="morgan_stanley"):
        load_config(_write(tmp_path, {"sources": {"morgan_stanley": {"enabled": True}}}))


def test_invalid_concurrency_limit(tmp_path):
    with pytest.raises(ConfigError):
        load_config(_write(tmp_path, {"sources": {"stifel": {"concurrency_limit": 0}}}))


def test_unreadable_file(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(ConfigError):
        load_config(str(path))
    with pytest.raises(ConfigError):
        load_config(str(tmp_path / "missing.json"))


def test_config_is_frozen():
    config = load_config()
    with pytest.raises(ValidationError):
        config.headless = False
    with pytest.raises(ValidationError):
        config.sources["lpl"].enabled = False
