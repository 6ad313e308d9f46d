"""Plain-text extraction for staged resume files.

Dispatch is a registry keyed by lower-cased extension:
1. ``.pdf``  -> pypdf page text.
2. ``.docx`` -> python-docx paragraphs and table rows.
3. anything else (including ``.txt``) -> raw UTF-8 read.

The staged file is only read here; its lifetime belongs to the caller.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List

from skillsync.errors import ExtractionError

logger = logging.getLogger(__name__)

Extractor = Callable[[Path], str]

_EXTRACTORS: Dict[str, Extractor] = {}


def register_extractor(extension: str, extractor: Extractor) -> None:
    """Register (or replace) the extractor used for ``extension``."""
    _EXTRACTORS[extension.lower()] = extractor


def extract_text(path: Path, extension: str) -> str:
    """Extract normalised text from ``path`` using the extractor for ``extension``.

    Raises:
        ExtractionError: the document could not be parsed or yielded no text.
    """
    extractor = _EXTRACTORS.get(extension.lower(), _read_plain_text)
    logger.debug(
        f"Extracting text from {path.name} using {getattr(extractor, '__name__', extractor)}"
    )
    try:
        text = extractor(Path(path))
    except ExtractionError:
        raise
    except Exception as exc:
        logger.warning(f"Text extraction failed for {path.name}: {exc}")
        raise ExtractionError() from exc

    text = _normalise_text(text or "")
    if not text.strip():
        raise ExtractionError()
    logger.debug(f"Extracted {len(text)} characters from {path.name}")
    return text


def _read_pdf(path: Path) -> str:
    """Concatenate the text of every page; unreadable pages count as empty."""
    from pypdf import PdfReader

    reader = PdfReader(str(path))
    pages: List[str] = []
    for index, page in enumerate(reader.pages):
        try:
            pages.append(page.extract_text() or "")
        except Exception as exc:  # pragma: no cover - depends on the PDF
            logger.debug(f"Page {index + 1} of {path.name} unreadable: {exc}")
            pages.append("")
    return "\n".join(pages)


def _read_docx(path: Path) -> str:
    """Paragraph text followed by flattened table rows."""
    import docx

    document = docx.Document(str(path))
    blocks = [p.text.strip() for p in document.paragraphs if p.text.strip()]
    for table in getattr(document, "tables", []):
        blocks.extend(_flatten_table(table))
    return "\n".join(blocks)


def _flatten_table(table: Any) -> Iterable[str]:
    """Yield one ``a | b | c`` line per table row so skill grids are kept."""
    for row in getattr(table, "rows", []):
        cells = [
            cell.text.strip() for cell in getattr(row, "cells", []) if cell.text.strip()
        ]
        if cells:
            yield " | ".join(cells)


def _read_plain_text(path: Path) -> str:
    return path.read_bytes().decode("utf-8", errors="replace")


def _normalise_text(text: str) -> str:
    text = unicodedata.normalize("NFKC", text)
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"[ \t]+", " ", text)
    text = _normalise_bullets(text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _normalise_bullets(text: str) -> str:
    bullet_chars = {"•", "◦", "▪", "‣"}
    lines = []
    for line in text.split("\n"):
        stripped = line.lstrip()
        if stripped and stripped[0] in bullet_chars:
            line = "- " + stripped[1:].lstrip()
        lines.append(line)
    return "\n".join(lines)


register_extractor(".pdf", _read_pdf)
register_extractor(".docx", _read_docx)
register_extractor(".txt", _read_plain_text)
