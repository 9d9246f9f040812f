# store/firestore_store.py
from __future__ import annotations

import logging
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Generic, List, Mapping, Optional, Type

from google.cloud.firestore import async_transactional

from shared import time
from store.base import M, EntityNotFoundError, GuardFailedError, drop_nones

logger = logging.getLogger(__name__)

# Firestore caps "in" filters at 30 values per query
_IN_CHUNK = 30


def _encode(value: Any) -> Any:
    """Make a value Firestore-storable: enums to values, bare dates to ISO strings."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date) and not isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {k: _encode(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_encode(v) for v in value]
    return value


class FirestoreEntityStore(Generic[M]):
    """
    Firestore-backed accessor for one entity type. The document id is the
    entity id and is mirrored into the `id_field` attribute of the record.
    """

    def __init__(
        self,
        db,
        collection_name: str,
        model: Type[M],
        id_field: str,
        *,
        soft_delete: bool = False,
    ):
        self.db = db
        self.collection_name = collection_name
        self.collection = db.collection(collection_name)
        self.model = model
        self.id_field = id_field
        self.soft_delete = soft_delete

    # ---------------------- internal utils -----------------------------------

    def _to_model(self, doc_id: str, data: Dict[str, Any]) -> M:
        data = dict(data)
        data.setdefault(self.id_field, doc_id)
        return self.model.model_validate(data)

    def _is_deleted(self, data: Mapping[str, Any]) -> bool:
        return self.soft_delete and data.get("deleted_at") is not None

    def _base_query(self, filters: Dict[str, Any]):
        q = self.collection
        for k, v in filters.items():
            q = q.where(k, "==", _encode(v))
        if self.soft_delete:
            q = q.where("deleted_at", "==", None)
        return q

    # --------------------------- queries -------------------------------------

    async def get(self, item_id: str) -> Optional[M]:
        if not item_id:
            return None
        snap = await self.collection.document(item_id).get()
        if not snap.exists:
            return None
        data = snap.to_dict() or {}
        if self._is_deleted(data):
            return None
        return self._to_model(snap.id, data)

    async def list(
        self,
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        **filters: Any,
    ) -> List[M]:
        in_filters = {k: list(v) for k, v in filters.items() if isinstance(v, (list, tuple, set))}
        eq_filters = {k: v for k, v in filters.items() if k not in in_filters and v is not None}
        if len(in_filters) > 1:
            raise ValueError(f"{self.collection_name}: at most one 'in' filter per query")

        if not in_filters:
            q = self._base_query(eq_filters)
            if order_by:
                q = q.order_by(order_by, direction="DESCENDING" if descending else "ASCENDING")
            if limit:
                q = q.limit(limit)
            return [self._to_model(d.id, d.to_dict() or {}) async for d in q.stream()]

        (field, values), = in_filters.items()
        if not values:
            return []

        # One query per chunk, merged and ordered here
        seen: Dict[str, M] = {}
        for start in range(0, len(values), _IN_CHUNK):
            chunk = [_encode(v) for v in values[start:start + _IN_CHUNK]]
            q = self._base_query(eq_filters).where(field, "in", chunk)
            async for d in q.stream():
                seen[d.id] = self._to_model(d.id, d.to_dict() or {})

        out = list(seen.values())
        if order_by:
            out.sort(key=lambda m: (getattr(m, order_by) is None, getattr(m, order_by)), reverse=descending)
        return out[:limit] if limit else out

    # ------------------------- mutations -------------------------------------

    async def create(self, data: Mapping[str, Any]) -> M:
        payload = drop_nones(data)
        doc_ref = self.collection.document()
        now = time.utcnow()
        payload[self.id_field] = doc_ref.id
        payload.setdefault("created_at", now)
        payload.setdefault("updated_at", now)
        if self.soft_delete:
            payload["deleted_at"] = None

        # validate before persisting so a bad payload never lands in the store
        record = self.model.model_validate(payload)
        await doc_ref.set(_encode(payload))
        logger.info("[STORE] Created %s/%s", self.collection_name, doc_ref.id)
        return record

    async def update(
        self,
        item_id: str,
        changes: Mapping[str, Any],
        *,
        expect: Optional[Dict[str, Any]] = None,
    ) -> M:
        doc_ref = self.collection.document(item_id)
        patch = _encode(dict(changes))
        patch["updated_at"] = time.utcnow()

        @async_transactional
        async def _apply(transaction) -> Dict[str, Any]:
            snap = await doc_ref.get(transaction=transaction)
            current = snap.to_dict() if snap.exists else None
            if current is None or self._is_deleted(current):
                raise EntityNotFoundError(self.collection_name, item_id)
            for field, expected in (expect or {}).items():
                if current.get(field) != _encode(expected):
                    raise GuardFailedError(self.collection_name, item_id, field)
            transaction.update(doc_ref, patch)
            return {**current, **patch}

        merged = await _apply(self.db.transaction())
        return self._to_model(item_id, merged)

    async def delete(self, item_id: str) -> None:
        doc_ref = self.collection.document(item_id)
        snap = await doc_ref.get()
        if not snap.exists or self._is_deleted(snap.to_dict() or {}):
            raise EntityNotFoundError(self.collection_name, item_id)
        if self.soft_delete:
            await doc_ref.update({"deleted_at": time.utcnow()})
        else:
            await doc_ref.delete()
        logger.info("[STORE] Deleted %s/%s", self.collection_name, item_id)
