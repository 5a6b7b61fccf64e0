"""Canonical dictionary document: vendor joins, type resolution, sorting, JSON output."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from dd_core.errors import StreamError
from dd_core.resolver import GROUPED_TYPE, TypeResolver
from dd_core.store import EntityStore, Record

logger = logging.getLogger(__name__)

DEFAULT_INDENT = 4


def _to_int(value: Any, path: str) -> int:
    try:
        return int(str(value).strip(), 10)
    except (TypeError, ValueError):
        raise StreamError(
            f"Expected a base-10 integer, got {value!r}.",
            path=path,
            code="INVALID_NUMBER",
        ) from None


def _vendor_code(store: EntityStore, vendor_id: Optional[str], path: str) -> int:
    if vendor_id is None:
        return 0
    vendor = store.find_one("vendors", {"vendor-id": vendor_id})
    if vendor is None or vendor.get("code") is None:
        return 0
    return _to_int(vendor["code"], path)


def _flags(avp: Record) -> Dict[str, bool]:
    return {
        "mandatory": avp.get("mandatory") == "must",
        "protected": avp.get("protected") == "may",
        "mayEncrypt": avp.get("may-encrypt") == "yes",
        "vendorBit": avp.get("vendor-bit") == "must",
    }


def _compile_applications(store: EntityStore) -> List[Dict[str, Any]]:
    return [
        {
            "code": _to_int(app["id"], f"/applications/{app['id']}"),
            "name": app.get("name"),
        }
        for app in store.find("applications")
    ]


def _compile_commands(store: EntityStore) -> List[Dict[str, Any]]:
    commands = []
    for command in store.find("commands"):
        path = f"/commands/{command['applicationId']}/{command['code']}"
        commands.append({
            "code": _to_int(command["code"], path),
            "name": command.get("name"),
            "vendorId": _vendor_code(store, command.get("vendor-id"), path),
        })
    return commands


def _compile_avp(store: EntityStore, resolver: TypeResolver, avp: Record) -> Dict[str, Any]:
    path = f"/avps/{avp['applicationId']}/{avp['code']}"
    vendor_id = avp.get("vendor-id", avp.get("vendorId"))
    compiled: Dict[str, Any] = {
        "code": _to_int(avp["code"], path),
        "name": avp.get("name"),
        "vendorId": _vendor_code(store, vendor_id, path),
    }
    if avp.get("grouped"):
        compiled["type"] = GROUPED_TYPE
    elif avp.get("type") is not None:
        compiled["type"] = resolver.resolve(avp["type"], avp["applicationId"])
    compiled["flags"] = _flags(avp)

    if avp.get("grouped"):
        compiled["groupedAvps"] = list(avp.get("groupedAvpNames", []))

    if avp.get("enums") is not None:
        compiled["enums"] = [
            {"code": _to_int(item["code"], f"{path}/enums"), "name": item.get("name")}
            for item in avp["enums"]
        ]
    return compiled


def _sort_by_code(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(items, key=lambda item: item["code"])


def _sort_by_code_and_vendor(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(items, key=lambda item: (item["code"], item["vendorId"]))


def compile_dictionary(store: EntityStore) -> Dict[str, Any]:
    """Build the canonical dictionary document from a fully parsed store."""
    resolver = TypeResolver(store)
    avps = [_compile_avp(store, resolver, avp) for avp in store.find("avps")]
    return {
        "applications": _sort_by_code(_compile_applications(store)),
        "commands": _sort_by_code_and_vendor(_compile_commands(store)),
        "avps": _sort_by_code_and_vendor(avps),
    }


def dumps_dictionary(document: Dict[str, Any], indent: int = DEFAULT_INDENT) -> str:
    return json.dumps(document, indent=indent, ensure_ascii=False)


def write_dictionary(
    document: Dict[str, Any],
    path: Union[str, Path],
    indent: int = DEFAULT_INDENT,
) -> Path:
    """Write the document in one buffer; the target is replaced only on success."""
    target = Path(path)
    output = dumps_dictionary(document, indent=indent)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=str(target.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(output)
        os.replace(tmp_name, target)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    logger.info("Wrote dictionary %s", target)
    return target
