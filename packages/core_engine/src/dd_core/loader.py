"""Discovery of dictionary source documents."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

from dd_core.errors import DiscoveryError

ROOT_MODE = "root"
DIRECTORY_MODE = "directory"


@dataclass
class DictionarySources:
    """Ordered input documents for one compilation run.

    ``root`` mode holds a single document whose SYSTEM entities are inlined
    before parsing; ``directory`` mode holds independent documents parsed one
    after another.
    """

    mode: str
    paths: List[Path] = field(default_factory=list)

    @property
    def root(self) -> Path:
        return self.paths[0]


def _xml_files(directory: Path) -> List[Path]:
    return sorted(
        (
            path for path in directory.iterdir()
            if path.is_file() and path.name.lower().endswith(".xml")
        ),
        key=lambda path: path.name,
    )


def discover_sources(path: Union[str, Path]) -> DictionarySources:
    source = Path(path)
    if source.is_file():
        return DictionarySources(mode=ROOT_MODE, paths=[source])

    if source.is_dir():
        files = _xml_files(source)
        if files:
            return DictionarySources(mode=DIRECTORY_MODE, paths=files)
        raise DiscoveryError(
            f"Dictionary files not found in '{source}'.",
            path=str(source),
            code="NO_DICTIONARY_FILES",
        )

    raise DiscoveryError(
        f"Dictionary source '{source}' does not exist.",
        path=str(source),
        code="SOURCE_NOT_FOUND",
    )
