"""Backend adapters: convert the metadata published by each kind of server
into the plain cube records :meth:`Cube.from_plain` consumes."""

from . import mondrian, pytesseract, tesseract

ADAPTERS = {
    "mondrian": mondrian,
    "tesseract": tesseract,
    "pytesseract": pytesseract,
}

__all__ = ["ADAPTERS", "mondrian", "pytesseract", "tesseract"]
