import logging
import os
import shutil
import urllib.error
import urllib.request

from face_auth.app.errors import ModelLoadFailure


logger = logging.getLogger(__name__)


def ensure_model(model_path: str, url: str, timeout: float = 60.0) -> str:
    """Download the landmarker task file to model_path unless it already exists."""
    if os.path.exists(model_path):
        return model_path
    os.makedirs(os.path.dirname(os.path.abspath(model_path)), exist_ok=True)
    tmp_path = model_path + ".part"
    logger.info("Downloading face landmarker model from %s", url)
    try:
        with urllib.request.urlopen(url, timeout=timeout) as resp, open(tmp_path, "wb") as f:
            shutil.copyfileobj(resp, f)
    except (urllib.error.URLError, OSError) as e:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise ModelLoadFailure(f"Could not download face landmarker model: {e}") from e
    os.replace(tmp_path, model_path)
    logger.info("Saved %.1f MB to %s", os.path.getsize(model_path) / 1024 / 1024, model_path)
    return model_path
