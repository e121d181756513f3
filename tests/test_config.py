import os
from face_auth.app.config import AppConfig, load_config


def test_defaults():
    cfg = AppConfig()
    assert cfg.thresholds.match_threshold == 0.9
    assert cfg.detector.num_landmarks == 478
    assert cfg.detector.num_faces == 1
    assert cfg.paths.template_slot == "registeredFaceVector"


def test_load_config_from_yaml(tmp_path):
    data_dir = os.path.join(tmp_path, "data")
    path = os.path.join(tmp_path, "face-auth.yaml")
    with open(path, "w", encoding="utf-8") as f:
        f.write(
            "camera:\n"
            "  device_index: 2\n"
            "thresholds:\n"
            "  match_threshold: 0.95\n"
            "paths:\n"
            f"  data_dir: {data_dir}\n"
            "log_level: DEBUG\n"
        )
    cfg = load_config(path)
    assert cfg.camera.device_index == 2
    assert cfg.camera.width == 640
    assert cfg.thresholds.match_threshold == 0.95
    assert cfg.log_level == "DEBUG"
    assert os.path.isdir(data_dir)


def test_unreadable_config_keeps_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = os.path.join(tmp_path, "broken.yaml")
    with open(path, "w", encoding="utf-8") as f:
        f.write("thresholds: [unclosed\n")
    cfg = load_config(path)
    assert cfg.thresholds.match_threshold == 0.9


def test_unknown_keys_keep_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = os.path.join(tmp_path, "extra.yaml")
    with open(path, "w", encoding="utf-8") as f:
        f.write("camera:\n  lens: wide\n")
    cfg = load_config(path)
    assert cfg.camera.device_index == 0


def test_non_mapping_config_keeps_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = os.path.join(tmp_path, "list.yaml")
    with open(path, "w", encoding="utf-8") as f:
        f.write("- camera\n- thresholds\n")
    cfg = load_config(path)
    assert cfg.thresholds.match_threshold == 0.9


def test_empty_section_keeps_other_sections(tmp_path):
    data_dir = os.path.join(tmp_path, "data")
    path = os.path.join(tmp_path, "face-auth.yaml")
    with open(path, "w", encoding="utf-8") as f:
        f.write(
            "camera:\n"
            "thresholds:\n"
            "  match_threshold: 0.95\n"
            "paths:\n"
            f"  data_dir: {data_dir}\n"
        )
    cfg = load_config(path)
    assert cfg.camera.device_index == 0
    assert cfg.thresholds.match_threshold == 0.95
