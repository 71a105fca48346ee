from b3scraper.core.config import Config


def test_get_nested_values(isolated_config):
    isolated_config.write_text(
        "storage:\n  backend: mongo\n  collection: stocks\nfetcher:\n  timeout: 5\n",
        encoding="utf-8",
    )
    Config.reset()

    assert Config.get("storage", "backend") == "mongo"
    assert Config.get("fetcher", "timeout") == 5
    assert Config.get("fetcher", "missing", default=3) == 3
    assert Config.get("storage", "backend", "deeper", default="x") == "x"


def test_missing_file_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv("B3SCRAPER_CONFIG", str(tmp_path / "nope.yaml"))
    Config.reset()

    assert Config.load() == {}
    assert Config.get("storage", "backend", default="filesystem") == "filesystem"


def test_config_is_cached(isolated_config):
    isolated_config.write_text("a: 1\n", encoding="utf-8")
    Config.reset()
    assert Config.get("a") == 1

    isolated_config.write_text("a: 2\n", encoding="utf-8")
    assert Config.get("a") == 1
    Config.reset()
    assert Config.get("a") == 2
