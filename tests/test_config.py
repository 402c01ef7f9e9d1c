from aicli.config import Config, load_config


def test_load_config_reads_api_key(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "placeholder")
    cfg = load_config()
    assert cfg.google_api_key == "placeholder"


def test_load_config_without_api_key(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    cfg = load_config()
    assert cfg.google_api_key == ""


def test_load_config_defaults(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    cfg = load_config()
    assert cfg.gemini_model == "gemini-2.0-flash"
    assert cfg.inference is None
    assert cfg.model is None


def test_load_config_returns_independent_instances():
    first = load_config()
    second = load_config()
    first.inference = "ollama"
    assert second.inference is None


def test_config_equals_load_config_with_same_values(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    assert load_config() == Config()