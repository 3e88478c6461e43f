"""
Generic CRUD engine over map-keyed and list-keyed collections.

Every mutating call follows the same cycle: load the collection (through
the store's cache), apply the change to a copy, save the whole copy. The
cached container is never mutated directly, so a failed save leaves the
cache exactly as it was.
"""

import uuid
from collections.abc import Mapping
from typing import Any, Optional, Union

from pydantic import BaseModel, ValidationError

from core.logging import get_logger
from core.storage import (
    BaseCollectionStore,
    Collection,
    CollectionData,
    Record,
    describe,
    utcnow,
)


logger = get_logger(__name__)


CollectionName = Union[Collection, str]

# Fields the engine owns; callers cannot change them through update().
_IMMUTABLE_FIELDS = ("id", "createdAt")


class CrudEngine:
    """
    Uniform create/read/update/delete across all collections.

    NotFound is reported as None (or False for remove), never raised.
    Invalid records and write failures are logged and reported the same
    way. Only an unknown collection name raises.
    """

    def __init__(self, store: BaseCollectionStore):
        self.store = store

    def get_all(self, collection: CollectionName) -> CollectionData:
        """Whole collection, as a copy of the cached container."""
        data = self.store.load(collection)
        return dict(data) if isinstance(data, dict) else list(data)

    def get_by_id(self, collection: CollectionName, record_id: str) -> Optional[Record]:
        data = self.store.load(collection)
        if isinstance(data, dict):
            return data.get(record_id)
        for record in data:
            if record.id == record_id:
                return record
        return None

    def find_by(self, collection: CollectionName, field: str, value: Any) -> list[Record]:
        """
        Records whose ``field`` equals ``value``, in stored order.

        ``field`` may be the snake_case attribute or the camelCase key.
        Records lacking the field never match.
        """
        data = self.store.load(collection)
        records = data.values() if isinstance(data, dict) else data
        return [
            record for record in records
            if record.has(field) and record.get(field) == value
        ]

    def create(
        self,
        collection: CollectionName,
        item: Union[Mapping[str, Any], BaseModel],
    ) -> Optional[Record]:
        """
        Insert a new record.

        Generates an id when absent and stamps both timestamps. Returns
        the stored record, or None if it is invalid or was not persisted.
        """
        descriptor = describe(collection)
        if isinstance(item, BaseModel):
            document = item.model_dump(by_alias=True, exclude_none=True)
        else:
            document = descriptor.record_type.to_aliases(dict(item))

        now = utcnow()
        document["id"] = document.get("id") or str(uuid.uuid4())
        document["createdAt"] = now
        document["updatedAt"] = now
        record = self._validate(descriptor.record_type, document, "create")
        if record is None:
            return None

        data = self.store.load(descriptor.collection)
        if isinstance(data, dict):
            updated: CollectionData = {**data, record.id: record}
        else:
            updated = [*data, record]

        if not self.store.save(descriptor.collection, updated):
            return None

        logger.debug(
            "Record created",
            collection=descriptor.collection.value,
            record_id=record.id,
        )
        return record

    def update(
        self,
        collection: CollectionName,
        record_id: str,
        updates: Mapping[str, Any],
    ) -> Optional[Record]:
        """
        Shallow-merge ``updates`` onto an existing record.

        Keys in ``updates`` overwrite, other keys are untouched, and
        ``updatedAt`` is refreshed. Never creates a record. Returns the
        merged record, or None if missing, invalid or not persisted.
        """
        descriptor = describe(collection)
        data = self.store.load(descriptor.collection)

        if isinstance(data, dict):
            current = data.get(record_id)
            index = None
        else:
            index = next(
                (i for i, record in enumerate(data) if record.id == record_id),
                None,
            )
            current = data[index] if index is not None else None

        if current is None:
            return None

        document = current.to_document()
        changes = descriptor.record_type.to_aliases(dict(updates))
        for key in _IMMUTABLE_FIELDS:
            changes.pop(key, None)
        document.update(changes)
        document["updatedAt"] = utcnow()
        merged = self._validate(descriptor.record_type, document, "update")
        if merged is None:
            return None

        if isinstance(data, dict):
            replaced: CollectionData = {**data, record_id: merged}
        else:
            replaced = list(data)
            replaced[index] = merged

        if not self.store.save(descriptor.collection, replaced):
            return None
        return merged

    def remove(self, collection: CollectionName, record_id: str) -> bool:
        """Delete a record. False if it did not exist or was not persisted."""
        descriptor = describe(collection)
        data = self.store.load(descriptor.collection)

        if isinstance(data, dict):
            if record_id not in data:
                return False
            remaining: CollectionData = {
                key: record for key, record in data.items() if key != record_id
            }
        else:
            remaining = [record for record in data if record.id != record_id]
            if len(remaining) == len(data):
                return False

        if not self.store.save(descriptor.collection, remaining):
            return False

        logger.debug(
            "Record removed",
            collection=descriptor.collection.value,
            record_id=record_id,
        )
        return True

    def clear_cache(self) -> None:
        self.store.clear_cache()

    def _validate(
        self,
        record_type: type[Record],
        document: dict[str, Any],
        operation: str,
    ) -> Optional[Record]:
        try:
            return record_type.model_validate(document)
        except ValidationError as exc:
            logger.error(
                "Invalid record rejected",
                operation=operation,
                record_type=record_type.__name__,
                record_id=document.get("id"),
                error=str(exc),
            )
            return None
