import pytest

from sqleasy import ConfigError, config


def test_missing_config_file_is_empty(isolated_config):
    assert config.load_config() == {}
    assert config.default_database() == ":memory:"
    assert config.pragmas() == config.DEFAULT_PRAGMAS


def test_config_file_database_and_pragmas(isolated_config):
    (isolated_config / "sqleasy.yaml").write_text(
        "database: app.db\npragmas:\n  busy_timeout: 100\n  cache_size: -2000\n"
    )

    assert config.default_database() == "app.db"
    pragmas = config.pragmas()
    assert pragmas["busy_timeout"] == 100
    assert pragmas["cache_size"] == -2000
    assert pragmas["foreign_keys"] == "ON"


def test_env_overrides_database(isolated_config, monkeypatch):
    (isolated_config / "sqleasy.yaml").write_text("database: app.db\n")
    monkeypatch.setenv("SQLEASY_DB_PATH", "/tmp/other.db")

    assert config.default_database() == "/tmp/other.db"


def test_load_config_is_cached(isolated_config):
    path = isolated_config / "sqleasy.yaml"
    path.write_text("database: first.db\n")
    assert config.default_database() == "first.db"

    path.write_text("database: second.db\n")
    assert config.default_database() == "first.db"

    config.clear_cache()
    assert config.default_database() == "second.db"


@pytest.mark.parametrize(
    "content",
    [
        "- just\n- a list\n",
        "database: 5\n",
        "pragmas: [foreign_keys]\n",
        "pragmas:\n  'journal_mode; DROP TABLE x': 1\n",
        "pragmas:\n  journal_mode: 'WAL; DROP TABLE test'\n",
        "pragmas:\n  cache_size: 1.5\n",
        "pragmas:\n  journal_mode: [WAL]\n",
    ],
)
def test_invalid_config_rejected(isolated_config, content):
    (isolated_config / "sqleasy.yaml").write_text(content)

    with pytest.raises(ConfigError):
        config.load_config()


def test_pragma_values_accept_words_and_integers(isolated_config):
    (isolated_config / "sqleasy.yaml").write_text(
        "pragmas:\n  journal_mode: DELETE\n  cache_size: -2000\n  synchronous: 'NORMAL'\n"
    )

    pragmas = config.pragmas()
    assert pragmas["journal_mode"] == "DELETE"
    assert pragmas["cache_size"] == -2000
    assert pragmas["synchronous"] == "NORMAL"
