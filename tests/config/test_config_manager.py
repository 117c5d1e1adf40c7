from otzaria_toolkit.config import ConfigManager


def test_packaged_defaults_loaded(isolated_config):
    cfg = ConfigManager()
    assert cfg.get_value("history", "capacity") == 20
    assert cfg.get_value("export", "archive_prefix") == "Otzaria_Output"
    assert cfg.get_value("missing", "key", "fallback") == "fallback"
    assert "handlers" in cfg.get_logging_config()


def test_user_defaults_seeded(isolated_config):
    ConfigManager()
    assert (isolated_config / "transforms.yml").exists()
    assert (isolated_config / "logging.yml").exists()


def test_user_overrides_merge_per_section(isolated_config):
    isolated_config.mkdir(parents=True)
    (isolated_config / "transforms.yml").write_text(
        "history:\n  capacity: 5\nsplit:\n  tag: h3\n", encoding="utf-8"
    )
    cfg = ConfigManager()
    assert cfg.get_value("history", "capacity") == 5
    assert cfg.get_value("split", "tag") == "h3"
    assert cfg.get_value("split", "context_chars") == 20
    assert cfg.get_value("session_log", "capacity") == 50


def test_singleton_and_reset():
    first = ConfigManager()
    assert ConfigManager() is first
    ConfigManager.reset()
    assert ConfigManager() is not first
