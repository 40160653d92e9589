from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from persistence import AsyncStore, DuplicateId, ListQuery, StoreError

router = APIRouter(tags=["collections"])
logger = logging.getLogger(__name__)


def get_store(request: Request) -> AsyncStore:
    return request.app.state.store


def _http_error(e: StoreError) -> HTTPException:
    logger.debug("STORE ERROR: %r", e)
    if isinstance(e, LookupError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, DuplicateId):
        return HTTPException(status_code=409, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


async def _read_body(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors
        raise HTTPException(status_code=400, detail="invalid request body") from e


@router.get("/{collection}")
async def list_documents(collection: str, request: Request, store: AsyncStore = Depends(get_store)) -> list[dict[str, Any]]:
    try:
        query = ListQuery.from_params(request.query_params.multi_items())
        return await store.query(collection, query)
    except StoreError as e:
        raise _http_error(e) from e


@router.get("/{collection}/{item_id}")
async def get_document(collection: str, item_id: str, store: AsyncStore = Depends(get_store)) -> dict[str, Any]:
    try:
        return await store.get(collection, item_id)
    except StoreError as e:
        raise _http_error(e) from e


@router.post("/{collection}", status_code=201)
async def create_document(collection: str, request: Request, store: AsyncStore = Depends(get_store)) -> dict[str, Any]:
    body = await _read_body(request)
    try:
        return await store.post(collection, body)
    except StoreError as e:
        raise _http_error(e) from e


@router.put("/{collection}/{item_id}")
async def replace_document(
    collection: str, item_id: str, request: Request, store: AsyncStore = Depends(get_store)
) -> dict[str, Any]:
    body = await _read_body(request)
    try:
        return await store.put(collection, item_id, body)
    except StoreError as e:
        raise _http_error(e) from e


@router.patch("/{collection}/{item_id}")
async def merge_document(
    collection: str, item_id: str, request: Request, store: AsyncStore = Depends(get_store)
) -> dict[str, Any]:
    body = await _read_body(request)
    try:
        return await store.patch(collection, item_id, body)
    except StoreError as e:
        raise _http_error(e) from e


@router.delete("/{collection}/{item_id}", status_code=204)
async def delete_document(collection: str, item_id: str, store: AsyncStore = Depends(get_store)) -> Response:
    try:
        await store.delete(collection, item_id)
    except StoreError as e:
        raise _http_error(e) from e
    return Response(status_code=204)
