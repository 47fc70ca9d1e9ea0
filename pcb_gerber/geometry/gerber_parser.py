# pcb_gerber/geometry/gerber_parser.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Literal, Optional, Tuple
import math
import re

from ..config import AnalysisSettings
from ..ingest.layer_roles import RoleTag
from ..results import ContentFormat, Dimensions, FileAnalysis, Units
from .primitives import Bounds

_INCH_TO_MM = 25.4

ZeroSuppression = Literal["leading", "trailing", "none"]

_FS_RE = re.compile(r"^FS([LTD]?)([AI]?)X(\d)(\d)Y(\d)(\d)")
_AD_RE = re.compile(r"^ADD(\d+)([^,]+?)(?:,(.*))?$")
_EXCELLON_UNITS_RE = re.compile(r"^(METRIC|INCH)(?:,(LZ|TZ))?(?:,(0*)\.(0*))?$")
_FILE_FORMAT_RE = re.compile(r"FILE_FORMAT\s*=\s*(\d+)\s*:\s*(\d+)")
# A word made only of letter+number pairs, e.g. G01X1000Y-250D01 or T01C0.3
_WORD_RE = re.compile(r"^(?:[A-Z][+-]?[\d.]+)+$")
_PAIR_RE = re.compile(r"([A-Z])([+-]?[\d.]+)")


@dataclass(frozen=True)
class CoordinateFormat:
    int_digits: int = 2
    dec_digits: int = 4
    zeros: ZeroSuppression = "leading"

    def decode(self, raw: str) -> float:
        """
        Decode one coordinate number.

        Values with a decimal point are taken literally; otherwise the
        digits carry an implicit decimal point per the format, with
        trailing-zero suppression padded back out to full width.
        """
        if "." in raw:
            value = float(raw)
        else:
            sign = -1.0 if raw.startswith("-") else 1.0
            digits = raw.lstrip("+-")
            if not digits.isdigit():
                raise ValueError(f"bad coordinate value {raw!r}")
            if self.zeros == "trailing":
                digits = digits.ljust(self.int_digits + self.dec_digits, "0")
            value = sign * int(digits) / (10 ** self.dec_digits)
        if not math.isfinite(value):
            raise ValueError(f"non-finite coordinate {raw!r}")
        return value


def _split_words(chunk: str) -> List[str]:
    return [w.strip() for w in chunk.split("*") if w.strip()]


def iter_tokens(content: str) -> Iterator[Tuple[int, str, bool]]:
    """
    Yield (line_no, text, extended) for each command in a Gerber or
    Excellon file.

    - %...% parameter blocks are yielded whole with extended=True; they may
      span lines and hold several *-separated commands.
    - Other words end at '*' or at a line break (Excellon has no '*').
    - A line holding only '%' (Excellon header end) and ';' comment lines
      are yielded as-is.
    - A block still open at end of input is yielded as a plain word
      starting with '%', which the scanner reports as an error.
    """
    pending: Optional[List[str]] = None
    pending_line = 0

    for line_no, line in enumerate(content.splitlines(), 1):
        text = line.strip()
        if not text:
            continue

        if pending is None and (text == "%" or text.startswith(";")):
            yield line_no, text, False
            continue

        pos = 0
        while pos < len(text):
            if pending is not None:
                end = text.find("%", pos)
                if end < 0:
                    pending.append(text[pos:])
                    break
                pending.append(text[pos:end])
                yield pending_line, "".join(pending), True
                pending = None
                pos = end + 1
                continue

            start = text.find("%", pos)
            chunk = text[pos:] if start < 0 else text[pos:start]
            for word in _split_words(chunk):
                yield line_no, word, False
            if start < 0:
                break
            pending = []
            pending_line = line_no
            pos = start + 1

    if pending is not None:
        yield pending_line, "%" + "".join(pending), False


class _ContentScan:
    """
    Running state of one forward scan over a file.

    Every token is handled in isolation: a token that fails to parse adds
    an entry to `errors` and the scan moves on with its state intact.
    """

    def __init__(self, name: str, max_errors: int) -> None:
        self.name = name
        self.max_errors = max_errors

        self.units: Units = "mm"
        self.gerber_format = CoordinateFormat()
        self.excellon_zeros: ZeroSuppression = "leading"
        self.excellon_digits: Optional[Tuple[int, int]] = None
        self.is_gerber = False
        self.is_excellon = False

        self.x: Optional[float] = None
        self.y: Optional[float] = None
        self.bounds = Bounds()
        self.hole_sizes: List[float] = []
        self.trace_widths: List[float] = []
        self.drill_hits = 0

        self.errors: List[str] = []
        self._error_count = 0

    @property
    def _label(self) -> str:
        return f"{self.name}: " if self.name else ""

    def feed(self, line_no: int, text: str, extended: bool) -> None:
        try:
            if extended:
                self._parameter_block(text)
            else:
                self._word(text)
        except (ValueError, ArithmeticError, IndexError) as e:
            self._token_error(line_no, text, e)

    def _token_error(self, line_no: int, text: str, exc: Exception) -> None:
        self._error_count += 1
        if self._error_count > self.max_errors:
            return
        snippet = text if len(text) <= 40 else text[:37] + "..."
        self.errors.append(f"{self._label}line {line_no}: cannot parse '{snippet}': {exc}")

    def _to_mm(self, v: float) -> float:
        return v * _INCH_TO_MM if self.units == "inch" else v

    def _coordinate_format(self) -> CoordinateFormat:
        if not self.is_excellon:
            return self.gerber_format
        if self.excellon_digits is not None:
            i, d = self.excellon_digits
        else:
            i, d = (2, 4) if self.units == "inch" else (3, 3)
        return CoordinateFormat(i, d, self.excellon_zeros)

    # ------------------------------
    # Gerber extended (%...%) commands
    # ------------------------------

    def _parameter_block(self, block: str) -> None:
        words = _split_words(block)
        if not words:
            return
        self.is_gerber = True

        # Macro bodies hold primitive parameters, not board coordinates.
        if words[0].upper().startswith("AM"):
            return

        for w in words:
            self._parameter(w)

    def _parameter(self, word: str) -> None:
        u = word.upper()
        if u.startswith("FS"):
            m = _FS_RE.match(u)
            if not m:
                raise ValueError("malformed format specification")
            zeros: ZeroSuppression = {"T": "trailing", "D": "none"}.get(m.group(1), "leading")  # type: ignore[assignment]
            self.gerber_format = CoordinateFormat(int(m.group(3)), int(m.group(4)), zeros)
        elif u.startswith("MO"):
            if u == "MOIN":
                self.units = "inch"
            elif u == "MOMM":
                self.units = "mm"
            else:
                raise ValueError(f"unknown unit mode {word!r}")
        elif u.startswith("AD"):
            self._aperture(word)
        # LP, IP, OF, SR, TF/TA/TO/TD attributes etc. carry no size information

    def _aperture(self, word: str) -> None:
        m = _AD_RE.match(word)
        if not m:
            raise ValueError("malformed aperture definition")

        shape = m.group(2)
        if shape not in ("C", "R", "O"):
            # Polygons and macro apertures have no single representative width.
            return

        raw = m.group(3) or ""
        params = [float(p) for p in raw.split("X")] if raw else []

        if shape == "C":
            if not params:
                raise ValueError("circle aperture without diameter")
            width = params[0]
        else:
            if len(params) < 2:
                raise ValueError("rectangle/obround aperture needs two sizes")
            width = min(params[0], params[1])

        if width > 0:
            self.trace_widths.append(self._to_mm(width))

    # ------------------------------
    # Plain words (Gerber function codes, Excellon lines)
    # ------------------------------

    def _word(self, word: str) -> None:
        u = word.upper()

        if u == "%":
            return  # Excellon end of header
        if u.startswith("%"):
            raise ValueError("unterminated parameter block")
        if u.startswith(";"):
            m = _FILE_FORMAT_RE.search(u)
            if m:
                self.excellon_digits = (int(m.group(1)), int(m.group(2)))
            return
        if u.startswith("G04") or u.startswith("G4 "):
            return

        m = _EXCELLON_UNITS_RE.match(u)
        if m:
            self.is_excellon = True
            self.units = "mm" if m.group(1) == "METRIC" else "inch"
            if m.group(2) == "LZ":
                self.excellon_zeros = "trailing"
            elif m.group(2) == "TZ":
                self.excellon_zeros = "leading"
            if m.group(3) is not None:
                self.excellon_digits = (len(m.group(3)), len(m.group(4)))
            return

        if not _WORD_RE.match(u):
            return  # free text, unsupported header keyword

        pairs = _PAIR_RE.findall(u)
        if pairs[0][0] == "T":
            self._tool(pairs)
        else:
            self._coordinate_word(pairs)

    def _tool(self, pairs: List[Tuple[str, str]]) -> None:
        int(pairs[0][1])  # tool number must be an integer
        for letter, value in pairs[1:]:
            if letter != "C":
                continue
            diameter = float(value)
            self.is_excellon = True
            if diameter > 0:
                self.hole_sizes.append(self._to_mm(diameter))

    def _coordinate_word(self, pairs: List[Tuple[str, str]]) -> None:
        has_coord = False
        in_slot = False

        for letter, value in pairs:
            if letter in ("X", "Y"):
                v = self._to_mm(self._coordinate_format().decode(value))
                if letter == "X":
                    self.x = v
                else:
                    self.y = v
                has_coord = True
            elif letter == "G":
                code = int(float(value))
                if code == 70:
                    self.units = "inch"
                elif code == 71:
                    self.units = "mm"
                elif code == 85 and has_coord:
                    # Routed slot: X..Y..G85X..Y.. is one hit with two ends.
                    self._plot(hit=True)
                    has_coord = False
                    in_slot = True
            elif letter == "D":
                code = int(float(value))
                if code in (1, 2, 3) or code >= 10:
                    self.is_gerber = True
            elif letter == "M":
                code = int(float(value))
                if code == 48:
                    self.is_excellon = True
                elif code == 71:
                    self.units = "mm"
                elif code == 72:
                    self.units = "inch"
            # I/J arc offsets, N line numbers, F/S feeds are not positions

        if has_coord:
            self._plot(hit=not in_slot)

    def _plot(self, hit: bool) -> None:
        if self.x is None or self.y is None:
            return
        self.bounds.expand(self.x, self.y)
        if hit and self.is_excellon:
            self.drill_hits += 1

    # ------------------------------
    # Result
    # ------------------------------

    @property
    def content_format(self) -> ContentFormat:
        if self.is_excellon:
            return "excellon"
        if self.is_gerber:
            return "gerber"
        return "unknown"

    def finish(self, role: Optional[RoleTag]) -> FileAnalysis:
        errors = list(self.errors)
        suppressed = self._error_count - self.max_errors
        if suppressed > 0:
            errors.append(f"{self._label}{suppressed} more parse error(s) suppressed")

        dimensions: Optional[Dimensions] = None
        if self.bounds.has_area:
            dimensions = Dimensions(width=self.bounds.width, height=self.bounds.height)
        else:
            if self.content_format == "unknown":
                # Not Gerber or Excellon at all: one error for the whole file.
                errors = []
            errors.append(
                f"File '{self.name}' could not be parsed for meaningful geometric data to determine dimensions."
            )

        return FileAnalysis(
            name=self.name,
            role=role,
            dimensions=dimensions,
            min_trace_width=min(self.trace_widths) if self.trace_widths else None,
            min_hole_size=min(self.hole_sizes) if self.hole_sizes else None,
            is_board_outline=role is RoleTag.OUTLINE,
            content_format=self.content_format,
            units=self.units,
            drill_hits=self.drill_hits,
            errors=errors,
        )


def parse_gerber_content(
    content: str,
    *,
    name: str = "",
    role: Optional[RoleTag] = None,
    settings: Optional[AnalysisSettings] = None,
) -> FileAnalysis:
    """
    Extract dimensions, minimum trace width and minimum hole size from one
    Gerber or Excellon file in a single streaming pass.

    All sizes are converted to mm as they are read, using whatever unit is
    in effect at that point of the file. Malformed tokens are reported in
    `errors` and skipped; everything else in the file still counts.
    `dimensions` stays unset when no coordinate pair spans a non-zero area.
    """
    settings = settings or AnalysisSettings()

    if not content.strip():
        label = f"File '{name}'" if name else "File"
        return FileAnalysis(
            name=name,
            role=role,
            is_board_outline=role is RoleTag.OUTLINE,
            errors=[f"{label} is empty"],
        )

    scan = _ContentScan(name, settings.max_token_errors)
    for line_no, text, extended in iter_tokens(content):
        scan.feed(line_no, text, extended)
    return scan.finish(role)
