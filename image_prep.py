# image_prep.py
"""Image loading and per-field preprocessing ahead of OCR."""

from __future__ import annotations

import logging
from pathlib import Path

import cv2
import numpy as np

from scan_errors import PreprocessError, ScanIOError
from scan_regions import PreprocessFlags

logger = logging.getLogger(__name__)


def load_image(path: Path) -> np.ndarray:
    path = Path(path)
    if not path.exists():
        raise ScanIOError(f"screenshot not found: {path}")

    img_bgr = cv2.imread(str(path))
    if img_bgr is None:
        raise ScanIOError(f"could not read image: {path}")

    logger.debug("Loaded %s (%dx%d)", path.name, img_bgr.shape[1], img_bgr.shape[0])
    return img_bgr


def _to_gray(img: np.ndarray) -> np.ndarray:
    if img.ndim == 2:
        return img.copy()
    if img.ndim == 3 and img.shape[2] == 1:
        return img[:, :, 0].copy()
    if img.ndim == 3 and img.shape[2] == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)
    if img.ndim == 3 and img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2GRAY)
    raise PreprocessError(f"unsupported image shape {img.shape}")


def preprocess(sub_image: np.ndarray, flags: PreprocessFlags) -> np.ndarray:
    """
    Prepare a cropped field for OCR.

    Grayscale is always applied. Numeric fields additionally get an Otsu
    threshold, inversion (light digits on a dark panel become dark on light)
    and an upscale so the small glyphs are big enough for tesseract.
    """
    if sub_image is None or not isinstance(sub_image, np.ndarray):
        raise PreprocessError("no image to preprocess")
    if sub_image.size == 0:
        raise PreprocessError("image is empty")
    if sub_image.dtype != np.uint8:
        raise PreprocessError(f"unsupported dtype {sub_image.dtype}")
    if flags.scale < 1:
        raise PreprocessError(f"invalid scale factor {flags.scale}")

    try:
        gray = _to_gray(sub_image)

        if flags.binarize:
            gray = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)[1]

        if flags.invert:
            gray = cv2.bitwise_not(gray)

        if flags.scale > 1:
            h, w = gray.shape
            gray = cv2.resize(gray, (w * flags.scale, h * flags.scale), interpolation=cv2.INTER_CUBIC)
    except cv2.error as e:
        raise PreprocessError(f"OpenCV could not process image: {e}") from e

    return gray


def save_debug(path: Path, img: np.ndarray) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(path), img):
        raise ScanIOError(f"could not write debug image: {path}")
