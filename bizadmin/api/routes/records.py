"""CRUD + stats endpoints, one router per record store."""

from typing import Any, Dict

from fastapi import APIRouter, Request, Response, status
from fastapi.encoders import jsonable_encoder

from bizadmin.stores.base import RecordStore


def build_router(store: RecordStore) -> APIRouter:
    """Return a router exposing list/filter, get, create, update, delete and stats."""
    router = APIRouter()

    @router.get("")
    def list_records(request: Request) -> list:
        criteria = dict(request.query_params)
        records = store.filter(**criteria) if criteria else store.list()
        return jsonable_encoder(records)

    @router.get("/stats")
    def record_stats() -> Dict[str, Any]:
        return store.stats().to_dict()

    @router.get("/{record_id}")
    def get_record(record_id: int) -> Any:
        return jsonable_encoder(store.get(record_id))

    @router.post("", status_code=status.HTTP_201_CREATED)
    def create_record(payload: Dict[str, Any]) -> Any:
        return jsonable_encoder(store.create(payload))

    @router.patch("/{record_id}")
    def update_record(record_id: int, payload: Dict[str, Any]) -> Any:
        return jsonable_encoder(store.update(record_id, payload))

    @router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_record(record_id: int) -> Response:
        store.delete(record_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
