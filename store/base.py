# store/base.py
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Protocol, TypeVar

from pydantic import BaseModel

M = TypeVar("M", bound=BaseModel)


class EntityNotFoundError(LookupError):
    def __init__(self, collection: str, item_id: str):
        super().__init__(f"{collection}/{item_id} not found")
        self.collection = collection
        self.item_id = item_id


class GuardFailedError(Exception):
    """The record no longer matched the expected field values at write time."""

    def __init__(self, collection: str, item_id: str, field: str):
        super().__init__(f"{collection}/{item_id}: guard on '{field}' failed")
        self.collection = collection
        self.item_id = item_id
        self.field = field


class EntityStore(Protocol[M]):
    """
    Accessor contract for one entity type.
    - get/list hide soft-deleted records (deleted_at set).
    - list takes equality filters; a list/tuple value means "field in values".
    - update(expect=...) checks the given field values and writes atomically,
      raising GuardFailedError when any of them changed.
    """

    collection_name: str
    id_field: str

    async def get(self, item_id: str) -> Optional[M]: ...

    async def list(
        self,
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        **filters: Any,
    ) -> List[M]: ...

    async def create(self, data: Mapping[str, Any]) -> M: ...

    async def update(
        self,
        item_id: str,
        changes: Mapping[str, Any],
        *,
        expect: Optional[Dict[str, Any]] = None,
    ) -> M: ...

    async def delete(self, item_id: str) -> None: ...


def drop_nones(d: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}
