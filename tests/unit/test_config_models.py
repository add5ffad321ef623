import pytest
from pathlib import Path
from pydantic import ValidationError
from yoga.config.loader import load_config
from yoga.config.models import AppConfig, GeneralConfig, ThumbnailConfig, UiConfig

def test_config_defaults():
    config = AppConfig()
    assert config.general.max_probe_workers == 6
    assert config.general.probe_timeout_s == 15.0
    assert config.general.player_path == "vlc"
    assert config.general.cache_filename == ".video_duration_cache.json"
    assert ".mp4" in config.general.extensions
    assert config.ui.progress_bar_width == 24
    assert config.thumbnails.width == 320
    assert config.thumbnails.height == 180
    assert config.thumbnails.percent == 10
    assert config.thumbnails.dir_name == ".thumbnails"

def test_extensions_are_normalized():
    gen = GeneralConfig(extensions=["MP4", " .Mkv ", ""])
    assert gen.extensions == [".mp4", ".mkv"]

def test_empty_extensions_rejected():
    with pytest.raises(ValidationError):
        GeneralConfig(extensions=[" "])

def test_invalid_workers():
    with pytest.raises(ValidationError):
        GeneralConfig(max_probe_workers=0)

def test_invalid_timeout():
    with pytest.raises(ValidationError):
        GeneralConfig(probe_timeout_s=0)

def test_invalid_ui_values():
    with pytest.raises(ValidationError):
        UiConfig(progress_bar_width=2)
    with pytest.raises(ValidationError):
        UiConfig(progress_interval_s=-1)

def test_invalid_thumbnail_percent():
    with pytest.raises(ValidationError):
        ThumbnailConfig(percent=150)

def test_load_config_without_path_uses_defaults():
    assert load_config(None) == AppConfig()

def test_load_config_from_yaml(config_yaml_path):
    config = load_config(config_yaml_path)
    assert config.general.extensions == [".mp4", ".mkv"]
    assert config.general.max_probe_workers == 3
    assert config.general.player_path == "mpv"
    assert config.general.crop == "5:4"
    assert config.ui.progress_interval_s == 0.05
    assert config.ui.progress_bar_width == 24
    assert config.thumbnails.enabled is False
    assert config.thumbnails.width == 160

def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")

def test_load_config_empty_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(path) == AppConfig()

def test_load_config_not_a_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n")
    with pytest.raises(ValueError):
        load_config(path)

def test_load_config_invalid_value(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("general:\n  max_probe_workers: 0\n")
    with pytest.raises(ValidationError):
        load_config(path)
