"""Provide package metadata for `TexPatch`."""

import logging as _logging

__version__ = "1.0.0"
_logger = _logging.getLogger("texpatch")
_logger.addHandler(_logging.NullHandler())

__all__ = ["__version__"]
