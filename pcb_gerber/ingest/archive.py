# pcb_gerber/ingest/archive.py

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple
import io
import zipfile
import zlib

from ..config import AnalysisSettings
from ..exceptions import EmptyPackageError, InvalidArchiveError, UnsupportedArchiveError
from ..logging import get_logger

logger = get_logger("ingest.archive")


@dataclass(frozen=True)
class RawFile:
    """
    One file of an uploaded package, decoded to text.

    A file that could not be read or decoded is kept as a placeholder with
    empty content and the reason in `warnings`, so it still shows up in the
    analysis instead of silently vanishing.
    """
    name: str
    content: str
    warnings: Tuple[str, ...] = ()


def extract_package(blob: bytes, filename: str, settings: Optional[AnalysisSettings] = None) -> List[RawFile]:
    """
    Turn an uploaded blob into a flat list of text files.

    - Archive names (.zip by default) are opened in memory; directory
      entries and macOS packaging junk are skipped.
    - Any other name is treated as a single Gerber or drill file.
    - Per-entry read/decode failures become placeholder files with a warning.

    Raises EmptyPackageError when nothing usable is found, InvalidArchiveError
    when an archive name does not hold a readable archive, and
    UnsupportedArchiveError for RAR/7z uploads.
    """
    settings = settings or AnalysisSettings()

    if settings.is_unsupported_archive_name(filename):
        raise UnsupportedArchiveError(filename)

    if settings.is_archive_name(filename):
        files = _extract_zip(blob, filename, settings.text_encoding)
    else:
        files = [_decode_single(blob, filename, settings.text_encoding)]

    if not files:
        raise EmptyPackageError()

    logger.debug("Extracted %d file(s) from %s", len(files), filename)
    return files


def _extract_zip(blob: bytes, filename: str, encoding: str) -> List[RawFile]:
    try:
        zf = zipfile.ZipFile(io.BytesIO(blob), "r")
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, ValueError) as e:
        raise InvalidArchiveError(filename, str(e)) from e

    files: List[RawFile] = []
    with zf:
        for info in zf.infolist():
            if info.is_dir() or _is_junk_entry(info.filename):
                continue
            files.append(_read_entry(zf, info, encoding))
    return files


def _read_entry(zf: zipfile.ZipFile, info: zipfile.ZipInfo, encoding: str) -> RawFile:
    name = info.filename
    try:
        data = zf.read(info)
    except (zipfile.BadZipFile, zlib.error, NotImplementedError, RuntimeError, OSError, EOFError) as e:
        # RuntimeError covers encrypted entries.
        logger.warning("Could not read archive entry %s: %s", name, e)
        return RawFile(name=name, content="", warnings=(f"Could not read '{name}' from archive: {e}",))

    try:
        return RawFile(name=name, content=data.decode(encoding))
    except (UnicodeDecodeError, LookupError) as e:
        logger.warning("Could not decode archive entry %s as %s: %s", name, encoding, e)
        return RawFile(name=name, content="", warnings=(f"Could not decode '{name}' as {encoding} text: {e}",))


def _decode_single(blob: bytes, filename: str, encoding: str) -> RawFile:
    try:
        return RawFile(name=filename, content=blob.decode(encoding))
    except (UnicodeDecodeError, LookupError) as e:
        logger.warning("Could not decode %s as %s: %s", filename, encoding, e)
        return RawFile(name=filename, content="", warnings=(f"Could not decode '{filename}' as {encoding} text: {e}",))


def _is_junk_entry(name: str) -> bool:
    parts = [p for p in name.replace("\\", "/").split("/") if p]
    if any(p.lower() == "__macosx" for p in parts):
        return True
    if parts and parts[-1].startswith("._"):
        return True
    return False
