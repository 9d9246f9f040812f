# memory_store.py
from typing import Any, Dict, Generic, List, Mapping, Optional, Type
from enum import Enum
import uuid

from shared import time
from store.base import M, EntityNotFoundError, GuardFailedError, drop_nones
from store.data_store import _COLLECTIONS, DataStore

# -------------------------------------------------
# In-memory stand-in for FirestoreEntityStore; same contract, no network
# -------------------------------------------------


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


class InMemoryEntityStore(Generic[M]):
    def __init__(self, collection_name: str, model: Type[M], id_field: str, *, soft_delete: bool = False):
        self.collection_name = collection_name
        self.model = model
        self.id_field = id_field
        self.soft_delete = soft_delete
        self.docs: Dict[str, Dict[str, Any]] = {}
        self.calls: List[str] = []

    # ---------- test helpers ----------

    def seed(self, **data: Any) -> M:
        """Insert a record with a fixed id, bypassing create()."""
        data = _plain(data)
        item_id = data[self.id_field]
        if self.soft_delete:
            data.setdefault("deleted_at", None)
        record = self.model.model_validate(data)
        self.docs[item_id] = data
        return record

    def raw(self, item_id: str) -> Optional[Dict[str, Any]]:
        return self.docs.get(item_id)

    # ---------- contract ----------

    def _visible(self, data: Mapping[str, Any]) -> bool:
        return not (self.soft_delete and data.get("deleted_at") is not None)

    async def get(self, item_id: str) -> Optional[M]:
        self.calls.append("get")
        data = self.docs.get(item_id) if item_id else None
        if data is None or not self._visible(data):
            return None
        return self.model.model_validate(data)

    async def list(
        self,
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        **filters: Any,
    ) -> List[M]:
        self.calls.append("list")
        in_filters = {k: [_plain(x) for x in v] for k, v in filters.items() if isinstance(v, (list, tuple, set))}
        eq_filters = {k: _plain(v) for k, v in filters.items() if k not in in_filters and v is not None}
        if len(in_filters) > 1:
            raise ValueError(f"{self.collection_name}: at most one 'in' filter per query")

        out = []
        for data in self.docs.values():
            if not self._visible(data):
                continue
            if any(data.get(k) != v for k, v in eq_filters.items()):
                continue
            if any(data.get(k) not in v for k, v in in_filters.items()):
                continue
            out.append(self.model.model_validate(data))

        if order_by:
            out.sort(key=lambda m: (getattr(m, order_by) is None, getattr(m, order_by)), reverse=descending)
        return out[:limit] if limit else out

    async def create(self, data: Mapping[str, Any]) -> M:
        self.calls.append("create")
        payload = _plain(drop_nones(data))
        now = time.utcnow()
        payload[self.id_field] = uuid.uuid4().hex
        payload.setdefault("created_at", now)
        payload.setdefault("updated_at", now)
        if self.soft_delete:
            payload["deleted_at"] = None
        record = self.model.model_validate(payload)
        self.docs[payload[self.id_field]] = payload
        return record

    async def update(
        self,
        item_id: str,
        changes: Mapping[str, Any],
        *,
        expect: Optional[Dict[str, Any]] = None,
    ) -> M:
        self.calls.append("update")
        current = self.docs.get(item_id)
        if current is None or not self._visible(current):
            raise EntityNotFoundError(self.collection_name, item_id)
        for field, expected in (expect or {}).items():
            if current.get(field) != _plain(expected):
                raise GuardFailedError(self.collection_name, item_id, field)
        merged = {**current, **_plain(dict(changes)), "updated_at": time.utcnow()}
        record = self.model.model_validate(merged)
        self.docs[item_id] = merged
        return record

    async def delete(self, item_id: str) -> None:
        self.calls.append("delete")
        current = self.docs.get(item_id)
        if current is None or not self._visible(current):
            raise EntityNotFoundError(self.collection_name, item_id)
        if self.soft_delete:
            current["deleted_at"] = time.utcnow()
        else:
            del self.docs[item_id]


def make_memory_data_store() -> DataStore:
    stores = {
        attr: InMemoryEntityStore(collection, model, id_field, soft_delete=soft)
        for attr, (collection, model, id_field, soft) in _COLLECTIONS.items()
    }
    return DataStore(**stores)


def write_calls(store: DataStore) -> int:
    """Number of create/update/delete calls across every collection."""
    return sum(
        sum(1 for c in getattr(store, attr).calls if c in ("create", "update", "delete"))
        for attr in _COLLECTIONS
    )
