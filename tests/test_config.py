import json

from config import indicator_options, load_config, save_config
from constants import DEFAULT_CONFIG


def test_missing_file_gives_defaults(tmp_path):
    config = load_config(tmp_path / "missing.json")
    assert config == DEFAULT_CONFIG
    config["indicators"]["cpu"]["decay"] = 0.9
    assert DEFAULT_CONFIG["indicators"]["cpu"]["decay"] == 0.2


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("   ")
    assert load_config(path) == DEFAULT_CONFIG


def test_malformed_file_gives_defaults(tmp_path, caplog):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    assert load_config(path) == DEFAULT_CONFIG
    assert "malformed" in caplog.text


def test_partial_file_is_merged(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "colorblind_mode": True,
        "indicators": {"network": {"decay_factor": 0.99}},
    }))
    config = load_config(path)
    assert config["colorblind_mode"] is True
    assert config["indicators"]["network"]["decay_factor"] == 0.99
    assert config["indicators"]["network"]["update_interval_ms"] == 250
    assert config["indicators"]["cpu"] == DEFAULT_CONFIG["indicators"]["cpu"]


def test_save_then_load(tmp_path):
    path = tmp_path / "config.json"
    config = load_config(path)
    config["monitor_index"] = 2
    assert save_config(config, path)
    assert load_config(path)["monitor_index"] == 2


def test_save_failure_returns_false(tmp_path):
    assert not save_config({}, tmp_path / "no-such-dir" / "config.json")


def test_indicator_options():
    config = {"indicators": {"cpu": {"decay": 0.5}}}
    options = indicator_options(config, "cpu")
    assert options == {"decay": 0.5}
    options["decay"] = 1
    assert config["indicators"]["cpu"]["decay"] == 0.5
    assert indicator_options(config, "swap") == {}
