import pytest

from research_feed.config import AppConfig, ConfigError, config_path, load_config


def test_missing_file_uses_defaults(tmp_path):
    config = load_config(tmp_path / "absent.toml")
    assert config == AppConfig()
    assert config.crawl.max_results == 10
    assert config.crawl.max_detail_fetches == 40
    assert config.crawl.timeout_seconds == 8.0
    assert (config.limits.title, config.limits.requirements, config.limits.additional_info) == (
        120,
        320,
        360,
    )


def test_file_overrides_merge_with_defaults(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(
        """
[crawl]
index_url = "https://engineering.example.edu/awards/"
category = "Engineering"
max_results = 5
trusted_domains = [".Example.EDU"]

[vocabulary]
requirement_headings = ["Who Can Apply"]
"""
    )
    config = load_config(path)
    assert config.crawl.index_url == "https://engineering.example.edu/awards/"
    assert config.crawl.category == "Engineering"
    assert config.crawl.max_results == 5
    assert config.crawl.max_detail_fetches == 40
    assert config.crawl.trusted_domains == ["example.edu"]
    assert config.vocabulary.requirement_headings == ["who can apply"]
    assert "overview" in config.vocabulary.additional_headings


def test_environment_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("RESEARCH_FEED_INDEX_URL", "https://other.example.edu/list")
    monkeypatch.setenv("RESEARCH_FEED_CATEGORY", "Humanities")
    monkeypatch.setenv("RESEARCH_FEED_TIMEOUT", "2.5")
    config = load_config(tmp_path / "absent.toml")
    assert config.crawl.index_url == "https://other.example.edu/list"
    assert config.crawl.category == "Humanities"
    assert config.crawl.timeout_seconds == 2.5


@pytest.mark.parametrize(
    "body",
    [
        "[crawl]\nmax_results = 0\n",
        "[crawl]\ntimeout_seconds = -1\n",
        "[limits]\ntitle = 2\n",
        "[crawl]\nunknown_setting = 1\n",
        "this is not toml",
    ],
)
def test_invalid_settings_raise(tmp_path, body):
    path = tmp_path / "config.toml"
    path.write_text(body)
    with pytest.raises(ConfigError):
        load_config(path)


def test_bad_timeout_env_raises(tmp_path, monkeypatch):
    monkeypatch.setenv("RESEARCH_FEED_TIMEOUT", "soon")
    with pytest.raises(ConfigError):
        load_config(tmp_path / "absent.toml")


def test_config_path_resolution(monkeypatch, tmp_path):
    assert config_path("custom.toml").name == "custom.toml"
    monkeypatch.setenv("RESEARCH_FEED_CONFIG", str(tmp_path / "env.toml"))
    assert config_path(None) == tmp_path / "env.toml"
    monkeypatch.delenv("RESEARCH_FEED_CONFIG")
    assert config_path(None).name == "config.toml"
