# pcb_gerber/geometry/__init__.py

from .primitives import Bounds
from .gerber_parser import CoordinateFormat, iter_tokens, parse_gerber_content

__all__ = [
    "Bounds",
    "CoordinateFormat",
    "iter_tokens",
    "parse_gerber_content",
]
