import json

import settings
from settings import DEFAULT_SETTINGS, load_settings


def test_defaults_without_file(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "DEFAULT_CONFIG_FILE", tmp_path / "none.json")
    assert load_settings() == DEFAULT_SETTINGS


def test_file_then_env(tmp_path, monkeypatch):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"scratch": "tmp_scratch", "tessdata": "/td", "unknown": 1}), encoding="utf-8")
    monkeypatch.setenv("WARTRACKER_TESSDATA", "/env/td")
    monkeypatch.setenv("WARTRACKER_DEBUG", "true")

    result = load_settings(path)
    assert result["scratch"] == "tmp_scratch"
    assert result["tessdata"] == "/env/td"
    assert result["debug"] is True
    assert "unknown" not in result


def test_bad_file_falls_back(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_settings(path)["layout"] == "default"
