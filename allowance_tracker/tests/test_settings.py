import json

from allowance_tracker.services.settings import DEFAULTS, load_settings, save_settings


def test_missing_file_is_created_with_defaults(tmp_path):
    path = tmp_path / "conf" / "settings.json"
    settings = load_settings(str(path))
    assert settings == DEFAULTS
    assert json.loads(path.read_text(encoding="utf-8"))["currency_symbol"] == "₱"


def test_saved_values_are_merged_over_defaults(tmp_path):
    path = str(tmp_path / "settings.json")
    save_settings({"api_url": "http://budget.local/api"}, path)
    settings = load_settings(path)
    assert settings["api_url"] == "http://budget.local/api"
    assert settings["storage_path"] == DEFAULTS["storage_path"]


def test_corrupt_file_is_replaced(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{oops", encoding="utf-8")
    assert load_settings(str(path)) == DEFAULTS
    assert json.loads(path.read_text(encoding="utf-8")) == DEFAULTS
