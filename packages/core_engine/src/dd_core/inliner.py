"""External entity inlining for split dictionary documents.

Root dictionaries declare their parts as SYSTEM entities inside the DOCTYPE,
e.g. ``<!ENTITY TGPP SYSTEM "TGPP.xml">``, and pull them in with ``&TGPP;``.
The parser never fetches external entities itself; instead the referenced
files are substituted into the root text before parsing.
"""

import logging
import re
from pathlib import Path
from typing import Dict, Union

from dd_core.errors import StreamError

logger = logging.getLogger(__name__)

ENTITY_DECL_RE = re.compile(r"<!ENTITY\s+(.+?)\s+SYSTEM\s+\"(.+)\"\s*>")
ENTITY_REF_RE = re.compile(r"&([^;]+);")
XML_PROLOG_RE = re.compile(r"<\?xml.+\?>")


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise StreamError(
            f"Cannot read dictionary file '{path}': {exc}",
            path=str(path),
            code="UNREADABLE_FILE",
        ) from exc


def entity_map(text: str, base_dir: Union[str, Path]) -> Dict[str, str]:
    """Return entity name -> prolog-stripped content for every SYSTEM entity."""
    base = Path(base_dir)
    entities: Dict[str, str] = {}
    for match in ENTITY_DECL_RE.finditer(text):
        name, uri = match.group(1), match.group(2)
        content = _read_text(base / uri)
        entities[name] = XML_PROLOG_RE.sub("", content, count=1)
        logger.debug("Loaded entity %s from %s", name, base / uri)
    return entities


def inline_entities(text: str, base_dir: Union[str, Path]) -> str:
    entities = entity_map(text, base_dir)
    if not entities:
        return text

    def _substitute(match: "re.Match[str]") -> str:
        # Undeclared references (&lt;, &amp;, ...) stay as they are.
        return entities.get(match.group(1), match.group(0))

    return ENTITY_REF_RE.sub(_substitute, text)


def inline_file(path: Union[str, Path]) -> str:
    """Read a root dictionary document and inline its external entities."""
    root = Path(path)
    text = _read_text(root)
    inlined = inline_entities(text, root.parent)
    logger.info("Inlined %s (%d -> %d chars)", root, len(text), len(inlined))
    return inlined
