"""Type resolver: traces declared AVP types down to wire-level primitives.

Resolution strategy:
1. A fixed override table maps a few derived types straight to a primitive,
   whatever application they are requested from.
2. A primitive name resolves to itself.
3. Otherwise the typedefn is looked up under the requesting application,
   falling back to the universal application "0".
4. A definition whose own name is primitive resolves to that name.
5. Otherwise its type-parent is resolved next, under the application id of the
   lookup that succeeded, so a chain may cross from an application scope into
   the universal one and continue there.
Chains are tracked with a visited set: revisiting a (type, application) pair
means the source data is cyclic and the type can never resolve.
"""

import logging
from typing import Dict, List, Optional, Set, Tuple

from dd_core.errors import ResolutionError
from dd_core.store import BASE_APPLICATION_ID, EntityStore, Record

logger = logging.getLogger(__name__)

PRIMITIVE_TYPES = (
    "OctetString",
    "UTF8String",
    "Unsigned32",
    "Integer32",
    "Unsigned64",
    "Integer64",
    "Time",
    "IPAddress",
    "AppId",
)

# Derived types the runtime codec handles as one of its primitives.  Checked
# before any typedefn lookup, independent of application scope.
BASE_TYPE_OVERRIDES: Dict[str, str] = {
    "QoSFilterRule": "UTF8String",
    "Float32": "Unsigned32",
    "Float64": "Unsigned64",
    "Address": "OctetString",
    "DiameterIdentity": "UTF8String",
    "IPFilterRule": "UTF8String",
}

GROUPED_TYPE = "Grouped"


def is_primitive(type_name: str) -> bool:
    return type_name in PRIMITIVE_TYPES


def find_typedefn(
    store: EntityStore,
    type_name: str,
    application_id: str,
) -> Tuple[Optional[Record], str]:
    """Return the typedefn for ``type_name`` and the application it was found in."""
    typedefn = store.find_one(
        "typedefns", {"applicationId": str(application_id), "type-name": type_name}
    )
    if typedefn is None and str(application_id) != BASE_APPLICATION_ID:
        return find_typedefn(store, type_name, BASE_APPLICATION_ID)
    return typedefn, str(application_id)


def resolve_to_base_type(store: EntityStore, type_name: str, application_id: str) -> str:
    """Resolve ``type_name`` as declared in ``application_id`` to a primitive name."""
    requested = (type_name, str(application_id))
    chain: List[str] = []
    visited: Set[Tuple[str, str]] = set()
    current, app_id = requested

    while True:
        chain.append(current)
        if current in BASE_TYPE_OVERRIDES:
            return BASE_TYPE_OVERRIDES[current]
        if is_primitive(current):
            return current

        if (current, app_id) in visited:
            raise ResolutionError(
                f"Cyclic type definition for {type_name} in app {requested[1]}: "
                f"{' -> '.join(chain)}",
                path=f"/typedefns/{app_id}/{current}",
                code="CYCLIC_TYPE",
            )
        visited.add((current, app_id))

        typedefn, app_id = find_typedefn(store, current, app_id)
        if typedefn is None:
            raise ResolutionError(
                f"Unable to resolve type {type_name} for app {requested[1]}: "
                f"no definition of {current}",
                path=f"/typedefns/{requested[1]}/{current}",
                code="UNRESOLVED_TYPE",
            )
        if is_primitive(typedefn["type-name"]):
            return typedefn["type-name"]

        parent = typedefn.get("type-parent")
        if parent is None:
            raise ResolutionError(
                f"Unable to resolve type {type_name} for app {requested[1]}: "
                f"{current} has no type-parent",
                path=f"/typedefns/{app_id}/{current}",
                code="UNRESOLVED_TYPE",
            )
        logger.debug("Type %s (app %s) -> %s", current, app_id, parent)
        current = parent


class TypeResolver:
    """Memoizing front end over ``resolve_to_base_type`` for one compile run."""

    def __init__(self, store: EntityStore):
        self.store = store
        self._cache: Dict[Tuple[str, str], str] = {}

    def resolve(self, type_name: str, application_id: str) -> str:
        key = (type_name, str(application_id))
        if key not in self._cache:
            self._cache[key] = resolve_to_base_type(self.store, type_name, application_id)
        return self._cache[key]
