# pcb_gerber/ingest/layer_roles.py

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Literal, Optional, Tuple
import re


LayerSide = Literal["top", "bottom"]
LayerType = Literal["copper", "soldermask", "silkscreen", "keepout", "drill", "outline", "gerber"]


class RoleTag(str, Enum):
    """
    Manufacturing role of one file in a Gerber package.

    The value is the label shown to the user and the one matched when
    counting copper layers.
    """
    TOP_COPPER = "Top Copper"
    BOTTOM_COPPER = "Bottom Copper"
    TOP_SOLDER_MASK = "Top Soldermask"
    BOTTOM_SOLDER_MASK = "Bottom Soldermask"
    TOP_SILKSCREEN = "Top Silkscreen"
    BOTTOM_SILKSCREEN = "Bottom Silkscreen"
    KEEP_OUT = "Keepout"
    DRILL = "Drill"
    OUTLINE = "Outline"
    GENERIC_GERBER = "Gerber"
    UNKNOWN = "Unknown"

    @property
    def is_copper(self) -> bool:
        return "copper" in self.value.lower()


# Suffix -> (side, type). Suffixes are compared lower-case.
SUFFIX_TABLE: Dict[str, Tuple[Optional[LayerSide], LayerType]] = {
    ".gtl": ("top", "copper"),
    ".gbl": ("bottom", "copper"),
    ".gts": ("top", "soldermask"),
    ".gbs": ("bottom", "soldermask"),
    ".gto": ("top", "silkscreen"),
    ".gbo": ("bottom", "silkscreen"),
    ".gko": (None, "outline"),
    ".gm1": (None, "outline"),
    ".gml": (None, "outline"),
    ".drl": (None, "drill"),
    ".xln": (None, "drill"),
    ".txt": (None, "drill"),
    ".gbr": (None, "gerber"),
}

# Tool-specific layer names seen inside generic .gbr exports (KiCad, EasyEDA,
# Eagle CAM). Checked in order; the first alias contained in the normalized
# name wins.
_ALIAS_RULES: List[Tuple[List[str], Optional[LayerSide], LayerType]] = [
    (["fcu", "topcu", "toplayer", "coppertop", "topcopper"], "top", "copper"),
    (["bcu", "bottomcu", "bottomlayer", "copperbottom", "bottomcopper"], "bottom", "copper"),
    (["fmask", "topmask", "soldermasktop", "topsoldermask"], "top", "soldermask"),
    (["bmask", "bottommask", "soldermaskbottom", "bottomsoldermask"], "bottom", "soldermask"),
    (["fsilks", "topsilk", "silkscreentop", "topoverlay", "legendtop"], "top", "silkscreen"),
    (["bsilks", "bottomsilk", "silkscreenbottom", "bottomoverlay", "legendbottom"], "bottom", "silkscreen"),
    (["edgecuts", "boardoutline", "outline", "profile"], None, "outline"),
    (["keepout"], None, "keepout"),
    (["drill"], None, "drill"),
]

# Short aliases that only count as a whole word of the name ("board-NPTH",
# not "depth_map").
_TOKEN_ALIAS_RULES: List[Tuple[List[str], Optional[LayerSide], LayerType]] = [
    (["npth", "pth"], None, "drill"),
]

_SIDED_ROLES: Dict[Tuple[LayerSide, LayerType], RoleTag] = {
    ("top", "copper"): RoleTag.TOP_COPPER,
    ("bottom", "copper"): RoleTag.BOTTOM_COPPER,
    ("top", "soldermask"): RoleTag.TOP_SOLDER_MASK,
    ("bottom", "soldermask"): RoleTag.BOTTOM_SOLDER_MASK,
    ("top", "silkscreen"): RoleTag.TOP_SILKSCREEN,
    ("bottom", "silkscreen"): RoleTag.BOTTOM_SILKSCREEN,
}

_UNSIDED_ROLES: Dict[LayerType, RoleTag] = {
    "drill": RoleTag.DRILL,
    "outline": RoleTag.OUTLINE,
    "keepout": RoleTag.KEEP_OUT,
    "gerber": RoleTag.GENERIC_GERBER,
}

_GOLD_FINGER_RE = re.compile(r"gold[\s_\-]?finger", re.IGNORECASE)


def _norm(s: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", (s or "").lower().strip())


def _basename(name: str) -> str:
    return name.replace("\\", "/").rsplit("/", 1)[-1]


def _suffix(name: str) -> str:
    base = _basename(name).lower()
    dot = base.rfind(".")
    return base[dot:] if dot > 0 else ""


def compose_role(side: Optional[str], layer_type: Optional[str]) -> RoleTag:
    """
    Turn a (side, type) classification into a RoleTag.

    Sided types compose as "{Side} {Type}". Drill and outline are reported
    without a side even when one is given. Anything else is Unknown.
    """
    if layer_type is None:
        return RoleTag.UNKNOWN

    t = layer_type.lower()
    if t in _UNSIDED_ROLES:
        return _UNSIDED_ROLES[t]  # type: ignore[index]

    if side is None:
        return RoleTag.UNKNOWN

    return _SIDED_ROLES.get((side.lower(), t), RoleTag.UNKNOWN)  # type: ignore[arg-type]


def _classify_by_alias(name: str) -> Optional[Tuple[Optional[LayerSide], LayerType]]:
    stem = _basename(name)
    dot = stem.rfind(".")
    if dot > 0:
        stem = stem[:dot]
    n = _norm(stem)
    for aliases, side, layer_type in _ALIAS_RULES:
        if any(a in n for a in aliases):
            return side, layer_type
    words = set(re.split(r"[^a-z0-9]+", stem.lower()))
    for aliases, side, layer_type in _TOKEN_ALIAS_RULES:
        if words.intersection(aliases):
            return side, layer_type
    return None


def classify_file(name: str) -> RoleTag:
    """
    Infer the manufacturing role of a file from its name.

    Specific suffixes (.gtl, .gbs, .drl, ...) decide directly. Generic
    Gerber names (.gbr, or no known suffix) are refined by tool aliases
    such as "F_Cu" or "Edge_Cuts". Unrecognized names are Unknown, never
    an error.
    """
    entry = SUFFIX_TABLE.get(_suffix(name))

    if entry is not None and entry[1] != "gerber":
        return compose_role(*entry)

    alias = _classify_by_alias(name)
    if alias is not None:
        return compose_role(*alias)

    if entry is not None:
        return compose_role(*entry)

    return RoleTag.UNKNOWN


def is_gold_finger_name(name: str) -> bool:
    return bool(_GOLD_FINGER_RE.search(_basename(name)))
