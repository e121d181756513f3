import logging
import os
import yaml
from dataclasses import dataclass, field
from typing import Optional


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATHS = [
    os.environ.get("FACE_AUTH_CONFIG", ""),
    ".face-auth.yaml",
    "./config.yaml",
    "/etc/face-auth/config.yaml",
]

LANDMARKER_URL = (
    "https://storage.googleapis.com/mediapipe-models/face_landmarker/"
    "face_landmarker/float16/1/face_landmarker.task"
)


@dataclass
class CameraConfig:
    device_index: int = 0
    width: int = 640
    height: int = 480
    fps: int = 30
    # Frame dimension polling while the stream warms up
    ready_poll_interval: float = 0.1
    ready_timeout: float = 10.0


@dataclass
class DetectorConfig:
    model_path: str = field(
        default_factory=lambda: os.environ.get("FACE_AUTH_LANDMARKER_PATH", os.path.abspath("./models/face_landmarker.task"))
    )
    model_url: str = LANDMARKER_URL
    delegate: str = "GPU"  # GPU|CPU, GPU falls back to CPU
    num_faces: int = 1
    num_landmarks: int = 478
    min_detection_confidence: float = 0.5


@dataclass
class Thresholds:
    match_threshold: float = 0.9  # cosine similarity, strict greater-than


@dataclass
class DisplayConfig:
    refresh_hz: float = 60.0
    show_overlay: bool = False


@dataclass
class Paths:
    data_dir: str = field(default_factory=lambda: os.path.abspath("./data"))
    db_path: str = field(default_factory=lambda: os.path.abspath("./data/face_auth.db"))
    template_slot: str = "registeredFaceVector"


@dataclass
class AppConfig:
    camera: CameraConfig = field(default_factory=CameraConfig)
    detector: DetectorConfig = field(default_factory=DetectorConfig)
    thresholds: Thresholds = field(default_factory=Thresholds)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    paths: Paths = field(default_factory=Paths)
    log_level: str = "INFO"


def _merge_dict(d: dict, u: dict) -> dict:
    for k, v in u.items():
        if isinstance(v, dict) and isinstance(d.get(k), dict):
            d[k] = _merge_dict(d[k], v)
        else:
            d[k] = v
    return d


def _apply(cfg: AppConfig, data: dict) -> AppConfig:
    base = {
        "camera": cfg.camera.__dict__.copy(),
        "detector": cfg.detector.__dict__.copy(),
        "thresholds": cfg.thresholds.__dict__.copy(),
        "display": cfg.display.__dict__.copy(),
        "paths": cfg.paths.__dict__.copy(),
        "log_level": cfg.log_level,
    }
    merged = _merge_dict(base, data)
    # Manual map to dataclasses
    return AppConfig(
        camera=CameraConfig(**merged["camera"]),
        detector=DetectorConfig(**merged["detector"]),
        thresholds=Thresholds(**merged["thresholds"]),
        display=DisplayConfig(**merged["display"]),
        paths=Paths(**merged["paths"]),
        log_level=str(merged.get("log_level", cfg.log_level)),
    )


def load_config(path: Optional[str] = None) -> AppConfig:
    cfg = AppConfig()
    candidates = [path] if path else [p for p in DEFAULT_CONFIG_PATHS if p]
    for p in candidates:
        if os.path.exists(p):
            try:
                with open(p, "r", encoding="utf-8") as f:
                    data = yaml.safe_load(f) or {}
                if not isinstance(data, dict):
                    logger.warning("Ignoring config %s: top level must be a mapping", p)
                    continue
                cfg = _apply(cfg, {k: v for k, v in data.items() if v is not None})
            except (yaml.YAMLError, TypeError) as e:
                # Keep defaults on parse errors
                logger.warning("Ignoring unreadable config %s: %s", p, e)
    # Ensure dirs
    os.makedirs(cfg.paths.data_dir, exist_ok=True)
    return cfg
