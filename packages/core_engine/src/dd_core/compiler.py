"""One dictionary compilation run: discover, parse, canonicalize."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

from dd_core.canonical import compile_dictionary
from dd_core.inliner import inline_file
from dd_core.loader import ROOT_MODE, DictionarySources, discover_sources
from dd_core.parser import DictionaryParser
from dd_core.store import EntityStore

logger = logging.getLogger(__name__)


@dataclass
class CompileResult:
    document: Dict[str, Any]
    store: EntityStore
    sources: List[str] = field(default_factory=list)

    def summary(self) -> Dict[str, int]:
        return {
            "applications": len(self.document["applications"]),
            "commands": len(self.document["commands"]),
            "avps": len(self.document["avps"]),
            "vendors": len(self.store.collection("vendors")),
            "typedefns": len(self.store.collection("typedefns")),
        }


def parse_sources(sources: DictionarySources, store: EntityStore) -> List[str]:
    """Fill ``store`` from the given sources and return what was parsed."""
    parser = DictionaryParser(store)
    if sources.mode == ROOT_MODE:
        parser.parse_text(inline_file(sources.root), source=str(sources.root))
    else:
        parser.parse_files(sources.paths)
    return parser.sources


def compile_sources(sources: DictionarySources) -> CompileResult:
    store = EntityStore()
    parsed = parse_sources(sources, store)
    logger.info("Parsed %d document(s): %s", len(parsed), store.counts())
    document = compile_dictionary(store)
    return CompileResult(document=document, store=store, sources=parsed)


def compile_path(path: Union[str, Path]) -> CompileResult:
    """Compile a root dictionary file or a directory of dictionary files."""
    return compile_sources(discover_sources(path))
