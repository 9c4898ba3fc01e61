import json
import os

from bubble_art.config import DEFAULT_CONFIG, Config
from bubble_art.model import CapabilityTier, QualityLevel


def test_load_missing_creates_defaults(tmp_path):
    path = tmp_path / "cfg" / "bubble_art.json"
    cfg = Config.load(str(path))
    assert path.exists()
    assert cfg.block_size == 12
    assert cfg.capability_tier is CapabilityTier.UNCONSTRAINED
    assert cfg.quality is QualityLevel.HIGH


def test_load_missing_without_create(tmp_path):
    path = tmp_path / "none.json"
    Config.load(str(path), create_if_missing=False)
    assert not path.exists()


def test_invalid_values_fall_back(tmp_path):
    path = tmp_path / "c.json"
    path.write_text(json.dumps({
        "convert": {"block_size": "huge", "max_width": 99999, "capability_tier": "phone"},
        "export": {"quality": "insane"},
        "filters": {"contrast": -4, "enabled": "no"},
        "logging": {"level": "chatty"},
    }), encoding="utf-8")
    cfg = Config.load(str(path))
    assert cfg["convert"]["block_size"] == 12
    assert cfg["convert"]["max_width"] == 8192
    assert cfg["convert"]["capability_tier"] == "unconstrained"
    assert cfg["export"]["quality"] == "high"
    assert cfg["filters"]["contrast"] == 0.1
    assert cfg["filters"]["enabled"] is False
    assert cfg["logging"]["level"] == "INFO"


def test_corrupt_file_is_backed_up(tmp_path):
    path = tmp_path / "c.json"
    path.write_text("{not json", encoding="utf-8")
    cfg = Config.load(str(path))
    assert os.path.exists(str(path) + ".corrupt.bak")
    assert cfg.block_size == DEFAULT_CONFIG["convert"]["block_size"]


def test_update_and_save_round_trip(tmp_path):
    path = tmp_path / "c.json"
    cfg = Config.load(str(path))
    cfg.update({"convert": {"block_size": 8, "capability_tier": "constrained"}, "export": {"quality": "ultra"}})
    cfg.save()
    again = Config.load(str(path))
    assert again.block_size == 8
    assert again.capability_tier is CapabilityTier.CONSTRAINED
    assert again.quality is QualityLevel.ULTRA
    assert again.progress_updates(CapabilityTier.CONSTRAINED) == 200


def test_mutation_does_not_leak_into_defaults(tmp_path):
    cfg = Config.load(str(tmp_path / "c.json"))
    cfg["export"]["quality"] = "medium"
    assert DEFAULT_CONFIG["export"]["quality"] == "high"


def test_env_override_path(tmp_path, monkeypatch):
    target = tmp_path / "env.json"
    monkeypatch.setenv("BUBBLE_ART_CONFIG", str(target))
    cfg = Config.load()
    assert cfg.path == str(target)
    assert target.exists()
