"""
Device selection for local STT inference. GPU is used only when APP_ENV=prod
and CTranslate2 (the faster-whisper runtime) can see a CUDA device.
"""
import logging
from typing import Literal, Tuple

from app.core.config import settings

logger = logging.getLogger(__name__)

# Cached so we don't probe CUDA on every model load
_infer_device: str | None = None


def get_infer_device() -> Literal["cuda", "cpu"]:
    global _infer_device
    if _infer_device is not None:
        return _infer_device

    if not settings.is_prod:
        _infer_device = "cpu"
        logger.debug("Device: app_env=%s, using cpu", settings.app_env)
        return _infer_device

    try:
        import ctranslate2
        cuda_count = ctranslate2.get_cuda_device_count()
    except Exception as e:
        logger.warning("Device: could not query CUDA devices, using cpu: %s", e)
        cuda_count = 0

    _infer_device = "cuda" if cuda_count > 0 else "cpu"
    logger.info("Device: using %s (cuda_devices=%d)", _infer_device, cuda_count)
    return _infer_device


def get_compute_type() -> Tuple[str, str]:
    """Device and compute_type for faster-whisper: float16 on GPU, int8 on CPU."""
    device = get_infer_device()
    if device == "cuda":
        return "cuda", "float16"
    return "cpu", "int8"
