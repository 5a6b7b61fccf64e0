"""In-memory deduplicating store for parsed dictionary entities.

Each collection keeps its records in insertion order plus one hash index per
natural key.  Records are plain dicts shaped like the tag attributes they were
built from, with the scope fields (``applicationId``, ``vendorId``) stamped in
by the parser.
"""

import copy
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from dd_core.errors import StoreError

logger = logging.getLogger(__name__)

BASE_APPLICATION_ID = "0"
BASE_APPLICATION_NAME = "Diameter Common Messages"

Record = Dict[str, Any]
Key = Tuple[str, ...]

# collection -> natural keys its records are indexed under
COLLECTION_KEYS: Dict[str, Tuple[Key, ...]] = {
    "applications": (("id",),),
    "vendors": (("vendor-id",),),
    "commands": (("applicationId", "code"),),
    "typedefns": (("applicationId", "type-name"),),
    "avps": (("applicationId", "code"), ("vendorId", "code")),
}


def base_application() -> Record:
    return {"id": BASE_APPLICATION_ID, "name": BASE_APPLICATION_NAME}


def _key_values(record: Record, key: Key) -> Optional[Tuple[str, ...]]:
    values = []
    for field in key:
        value = record.get(field)
        if value is None:
            return None
        values.append(str(value))
    return tuple(values)


class Collection:
    def __init__(self, name: str, keys: Iterable[Key]):
        self.name = name
        self.keys: Tuple[Key, ...] = tuple(keys)
        self._records: List[Record] = []
        self._indexes: Dict[Key, Dict[Tuple[str, ...], Record]] = {key: {} for key in self.keys}
        # id(record) -> the key it was inserted under
        self._record_keys: Dict[int, Key] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    def _index(self, record: Record) -> None:
        # Indexed under its insertion key only; vendor-scoped AVPs also carry
        # applicationId "0" without owning that key.
        key = self._record_keys[id(record)]
        values = _key_values(record, key)
        index = self._indexes[key]
        if values is not None and values not in index:
            index[values] = record

    def _check_key(self, key: Key) -> None:
        if key not in self._indexes:
            raise StoreError(
                f"Collection '{self.name}' has no key {key}.",
                path=f"/{self.name}",
                code="UNKNOWN_KEY",
            )

    def get(self, key: Key, record: Record) -> Optional[Record]:
        self._check_key(key)
        values = _key_values(record, key)
        if values is None:
            return None
        return self._indexes[key].get(values)

    def insert(self, record: Record, key: Optional[Key] = None) -> Record:
        key = key or self.keys[0]
        self._check_key(key)
        self._records.append(record)
        self._record_keys[id(record)] = key
        self._index(record)
        return record

    def update(self, record: Record) -> Record:
        if id(record) not in self._record_keys:
            raise StoreError(
                f"Cannot update a record that is not stored in '{self.name}'.",
                path=f"/{self.name}",
                code="UNKNOWN_RECORD",
            )
        self._index(record)
        return record

    def find(self, query: Optional[Dict[str, Any]] = None) -> List[Record]:
        if not query:
            return list(self._records)
        return [
            record for record in self._records
            if all(record.get(field) == value for field, value in query.items())
        ]


class EntityStore:
    """The five dictionary collections of one compilation run."""

    def __init__(self):
        self.collections: Dict[str, Collection] = {}
        self.reset()

    def reset(self) -> None:
        """Drop every record and seed the universal application."""
        self.collections = {
            name: Collection(name, keys) for name, keys in COLLECTION_KEYS.items()
        }
        self.collections["applications"].insert(base_application())

    def collection(self, name: str) -> Collection:
        try:
            return self.collections[name]
        except KeyError:
            raise StoreError(
                f"Unknown collection '{name}'.",
                path=f"/{name}",
                code="UNKNOWN_COLLECTION",
            ) from None

    def find_or_insert(self, collection: str, candidate: Record, key: Key) -> Record:
        """Return the record stored under ``key``, inserting ``candidate`` if none.

        An existing record is returned unchanged; the candidate's values are
        discarded, never merged.
        """
        target = self.collection(collection)
        existing = target.get(key, candidate)
        if existing is not None:
            logger.debug("Dedup %s %s", collection, _key_values(candidate, key))
            return existing
        return target.insert(candidate, key)

    def update(self, collection: str, record: Record) -> Record:
        return self.collection(collection).update(record)

    def find(self, collection: str, query: Optional[Dict[str, Any]] = None) -> List[Record]:
        return self.collection(collection).find(query)

    def find_one(self, collection: str, query: Dict[str, Any]) -> Optional[Record]:
        target = self.collection(collection)
        # Exact natural-key queries go through the index.
        fields = tuple(query.keys())
        if fields in target.keys:
            return target.get(fields, query)
        matches = target.find(query)
        return matches[0] if matches else None

    def counts(self) -> Dict[str, int]:
        return {name: len(collection) for name, collection in self.collections.items()}

    def snapshot(self) -> Dict[str, List[Record]]:
        """JSON-ready copy of every collection, in insertion order."""
        return {
            name: copy.deepcopy(list(collection))
            for name, collection in self.collections.items()
        }
