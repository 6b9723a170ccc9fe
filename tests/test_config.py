import pytest

from tracker.config import DEFAULT_CONFIG, config


@pytest.fixture
def restore_config():
    yield
    config.reload()


def test_defaults():
    assert config.get("pagination", "page_size") == 8
    assert config.get("api", "prefix") == "/projects"
    assert config.get("missing", "key", "fallback") == "fallback"
    assert config.get("cache") == DEFAULT_CONFIG["cache"]


def test_yaml_overrides_are_merged(tmp_path, restore_config):
    path = tmp_path / "config.yaml"
    path.write_text("cache:\n  stats_expire: 5\nprojects:\n  strict_status: true\n", encoding="utf-8")

    config.reload(str(path))

    assert config.get("cache", "stats_expire") == 5
    assert config.get("projects", "strict_status") is True
    # 덮어쓰지 않은 값은 기본값 유지
    assert config.get("pagination", "page_size") == 8
    assert DEFAULT_CONFIG["cache"]["stats_expire"] == 30


def test_broken_yaml_falls_back_to_defaults(tmp_path, restore_config):
    path = tmp_path / "config.yaml"
    path.write_text("cache: [unclosed\n", encoding="utf-8")

    config.reload(str(path))

    assert config.get("cache", "stats_expire") == 30
