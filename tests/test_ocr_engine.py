import numpy as np
import pytest
import pytesseract
from pytesseract import TesseractError, TesseractNotFoundError

import ocr_engine
from conftest import ScriptedEngine
from ocr_engine import OCREngine, TesseractOCREngine, available_engines, create_engine, register_engine
from scan_errors import OCRError

IMG = np.full((20, 40), 255, dtype=np.uint8)


def test_config_includes_whitelist_and_dpi():
    engine = TesseractOCREngine(tessdata_dir="/opt/tessdata")
    config = engine.build_config("0123456789")
    assert "--psm 7" in config
    assert "--dpi 300" in config
    assert "--tessdata-dir" in config
    assert config.endswith("-c tessedit_char_whitelist=0123456789")
    assert "whitelist" not in engine.build_config(None)


def test_recognize_passes_config(monkeypatch):
    seen = {}

    def fake_image_to_string(image, config=""):
        seen["config"] = config
        return "<ABC>\n\x0c"

    monkeypatch.setattr(pytesseract, "image_to_string", fake_image_to_string)
    text = TesseractOCREngine().recognize(IMG, "<>ABC")
    assert text == "<ABC>"
    assert "tessedit_char_whitelist=<>ABC" in seen["config"]


@pytest.mark.parametrize("exc", [TesseractError(1, "bad"), TesseractNotFoundError(), OSError("gone")])
def test_recognize_wraps_engine_failures(monkeypatch, exc):
    def broken(image, config=""):
        raise exc

    monkeypatch.setattr(pytesseract, "image_to_string", broken)
    with pytest.raises(OCRError):
        TesseractOCREngine().recognize(IMG)


def test_ensure_available(monkeypatch):
    def missing():
        raise TesseractNotFoundError()

    monkeypatch.setattr(pytesseract, "get_tesseract_version", missing)
    with pytest.raises(OCRError, match="not installed"):
        TesseractOCREngine().ensure_available()


def test_factory(monkeypatch):
    monkeypatch.setattr(ocr_engine, "_ENGINE_REGISTRY", dict(ocr_engine._ENGINE_REGISTRY))
    assert isinstance(create_engine(), TesseractOCREngine)

    register_engine("scripted", ScriptedEngine)
    assert "scripted" in available_engines()
    engine = create_engine("scripted", responses=["x"])
    assert isinstance(engine, OCREngine)
    assert engine.recognize(IMG) == "x"

    with pytest.raises(ValueError):
        create_engine("nope")
    with pytest.raises(TypeError):
        register_engine("bad", dict)
