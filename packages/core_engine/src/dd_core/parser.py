"""Tag-driven streaming parser that fills an EntityStore.

The parser keeps a "current tag by name" context: opening a tag stores its
attributes under the tag name, closing it clears that slot.  Handlers for the
dictionary vocabulary read the context to find the enclosing application,
vendor or AVP and then stamp scope fields onto the records they insert.

Handlers may also park records under slot names of their own: ``<base>`` sets
the ``application`` slot (left open until an ``</application>``) and
``<vendor>`` sets ``vendors``, which a ``</vendor>`` does not clear, so that
AVPs following a self-closing vendor declaration are scoped to it.
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Union

from dd_core.errors import ContextError, StreamError
from dd_core.store import BASE_APPLICATION_ID, EntityStore, Record, base_application

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

Context = Dict[str, Optional[Record]]


def _require(attributes: Record, name: str, tag: str, source: str) -> str:
    value = attributes.get(name)
    if value is None:
        raise ContextError(
            f"<{tag}> is missing required attribute '{name}'.",
            path=source,
            code="MISSING_ATTRIBUTE",
        )
    return value


class _TagTarget:
    """ElementTree parser target forwarding open/close events to the parser."""

    def __init__(self, parser: "DictionaryParser"):
        self._parser = parser

    def start(self, tag: str, attrib: Dict[str, str]) -> None:
        self._parser.open_tag(
            tag.lower(), {name.lower(): value for name, value in attrib.items()}
        )

    def end(self, tag: str) -> None:
        self._parser.close_tag(tag.lower())

    def close(self) -> None:
        return None


class DictionaryParser:
    def __init__(self, store: EntityStore):
        self.store = store
        self.context: Context = {}
        self.sources: List[str] = []
        self._source = "<text>"
        self.handlers: Dict[str, Callable[[Record], None]] = {
            "application": self._on_application,
            "base": self._on_base,
            "vendor": self._on_vendor,
            "command": self._on_command,
            "typedefn": self._on_typedefn,
            "avp": self._on_avp,
            "type": self._on_type,
            "enum": self._on_enum,
            "grouped": self._on_grouped,
            "gavp": self._on_gavp,
        }

    # -- events ------------------------------------------------------------

    def open_tag(self, tag: str, attributes: Record) -> None:
        self.context[tag] = attributes
        handler = self.handlers.get(tag)
        if handler:
            handler(attributes)

    def close_tag(self, tag: str) -> None:
        self.context[tag] = None

    # -- context helpers ---------------------------------------------------

    def _current(self, slot: str, tag: str) -> Record:
        current = self.context.get(slot)
        if current is None:
            raise ContextError(
                f"<{tag}> found outside of any <{slot}>.",
                path=self._source,
                code=f"NO_CURRENT_{slot.upper()}",
            )
        return current

    def _current_vendor(self) -> Optional[Record]:
        vendor = self.context.get("vendors")
        if vendor is None:
            return None
        stored = self.store.find_one("vendors", {"vendor-id": vendor.get("vendor-id")})
        if stored is not vendor:
            raise ContextError(
                "Expected vendor as parent element.",
                path=self._source,
                code="INVALID_VENDOR_CONTEXT",
            )
        return vendor

    # -- handlers ----------------------------------------------------------

    def _on_application(self, attributes: Record) -> None:
        _require(attributes, "id", "application", self._source)
        self.context["application"] = self.store.find_or_insert(
            "applications", attributes, ("id",)
        )

    def _on_base(self, attributes: Record) -> None:
        self.context["application"] = self.store.find_or_insert(
            "applications", base_application(), ("id",)
        )

    def _on_vendor(self, attributes: Record) -> None:
        _require(attributes, "vendor-id", "vendor", self._source)
        self.context["vendors"] = self.store.find_or_insert(
            "vendors", attributes, ("vendor-id",)
        )

    def _on_command(self, attributes: Record) -> None:
        _require(attributes, "code", "command", self._source)
        application = self._current("application", "command")
        attributes["applicationId"] = application["id"]
        self.context["command"] = self.store.find_or_insert(
            "commands", attributes, ("applicationId", "code")
        )

    def _on_typedefn(self, attributes: Record) -> None:
        _require(attributes, "type-name", "typedefn", self._source)
        application = self._current("application", "typedefn")
        attributes["applicationId"] = application["id"]
        self.context["typedefn"] = self.store.find_or_insert(
            "typedefns", attributes, ("applicationId", "type-name")
        )

    def _on_avp(self, attributes: Record) -> None:
        _require(attributes, "code", "avp", self._source)
        application = self.context.get("application")
        if application is not None:
            attributes["applicationId"] = application["id"]
            key = ("applicationId", "code")
        else:
            vendor = self._current_vendor()
            if vendor is None:
                raise ContextError(
                    f"Neither the application nor the vendor is known for AVP "
                    f"'{attributes.get('name', attributes['code'])}'.",
                    path=self._source,
                    code="NO_AVP_SCOPE",
                )
            attributes["applicationId"] = BASE_APPLICATION_ID
            attributes["vendorId"] = vendor["vendor-id"]
            key = ("vendorId", "code")
        self.context["avp"] = self.store.find_or_insert("avps", attributes, key)

    def _on_type(self, attributes: Record) -> None:
        avp = self._current("avp", "type")
        avp["type"] = _require(attributes, "type-name", "type", self._source)
        self.store.update("avps", avp)

    def _on_enum(self, attributes: Record) -> None:
        avp = self._current("avp", "enum")
        avp.setdefault("enums", []).append(
            {"code": attributes.get("code"), "name": attributes.get("name")}
        )
        self.store.update("avps", avp)

    def _on_grouped(self, attributes: Record) -> None:
        avp = self._current("avp", "grouped")
        avp["grouped"] = True
        self.store.update("avps", avp)

    def _on_gavp(self, attributes: Record) -> None:
        avp = self._current("avp", "gavp")
        avp["grouped"] = True
        avp.setdefault("groupedAvpNames", []).append(
            _require(attributes, "name", "gavp", self._source)
        )
        self.store.update("avps", avp)

    # -- feeding -----------------------------------------------------------

    def _new_parser(self) -> ET.XMLParser:
        return ET.XMLParser(target=_TagTarget(self))

    def _stream_error(self, exc: ET.ParseError) -> StreamError:
        line, column = getattr(exc, "position", (0, 0))
        return StreamError(
            f"Malformed dictionary markup in {self._source} "
            f"at line {line}, column {column}: {exc}",
            path=self._source,
            code="MALFORMED_XML",
        )

    def parse_chunks(self, chunks: Iterable[Union[str, bytes]], source: str) -> None:
        """Feed one document to a fresh tokenizer, keeping context and store."""
        self._source = source
        parser = self._new_parser()
        try:
            for chunk in chunks:
                parser.feed(chunk)
            parser.close()
        except ET.ParseError as exc:
            raise self._stream_error(exc) from exc
        self.sources.append(source)
        logger.info("Parsed %s", source)

    def parse_text(self, text: str, source: str = "<text>") -> None:
        self.parse_chunks([text], source)

    def parse_file(self, path: Union[str, Path]) -> None:
        file_path = Path(path)
        try:
            with file_path.open("rb") as handle:
                self.parse_chunks(iter(lambda: handle.read(CHUNK_SIZE), b""), str(file_path))
        except OSError as exc:
            raise StreamError(
                f"Cannot read dictionary file '{file_path}': {exc}",
                path=str(file_path),
                code="UNREADABLE_FILE",
            ) from exc

    def parse_files(self, paths: Iterable[Union[str, Path]]) -> None:
        """Parse independent documents in order; later files see earlier scopes."""
        for path in paths:
            self.parse_file(path)


def parse_dictionary_text(text: str, store: Optional[EntityStore] = None) -> EntityStore:
    store = store or EntityStore()
    DictionaryParser(store).parse_text(text)
    return store


def parse_dictionary_files(
    paths: Iterable[Union[str, Path]],
    store: Optional[EntityStore] = None,
) -> EntityStore:
    store = store or EntityStore()
    DictionaryParser(store).parse_files(paths)
    return store
