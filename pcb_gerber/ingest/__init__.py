# pcb_gerber/ingest/__init__.py

from .archive import RawFile, extract_package
from .layer_roles import (
    RoleTag,
    classify_file,
    compose_role,
    is_gold_finger_name,
)

__all__ = [
    "RawFile",
    "RoleTag",
    "classify_file",
    "compose_role",
    "extract_package",
    "is_gold_finger_name",
]
