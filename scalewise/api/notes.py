"""
FastAPI router module for operator notes and UI state.

Small JSON values (offer notes, reviewed checkboxes) are kept in the
key-value store. The store is injected, so tests run against the in-memory
implementation.

Key Endpoints:
- GET /notes/{key} - Read a value (404 when absent)
- PUT /notes/{key} - Insert or replace a value
- DELETE /notes/{key} - Remove a value (404 when absent)

A store backend failure surfaces as StoreUnavailableError, which the
application maps to 503.
"""

import logging

from fastapi import APIRouter, HTTPException

from scalewise.core.dependencies import StoreDep
from scalewise.models.schemas import NotePayload, NoteResponse

logger = logging.getLogger(__name__)

router = APIRouter()

_MISSING = object()


@router.get("/{key}", response_model=NoteResponse)
async def get_note(key: str, store: StoreDep) -> NoteResponse:
    """Return the stored value for key."""
    value = await store.load(key, _MISSING)
    if value is _MISSING:
        raise HTTPException(status_code=404, detail=f"Note not found: {key}")
    return NoteResponse(key=key, value=value)


@router.put("/{key}", response_model=NoteResponse)
async def put_note(key: str, payload: NotePayload, store: StoreDep) -> NoteResponse:
    """Insert or replace the value for key."""
    await store.save(key, payload.value)
    logger.info(f"Saved note {key}")
    return NoteResponse(key=key, value=payload.value)


@router.delete("/{key}")
async def delete_note(key: str, store: StoreDep) -> dict:
    """Remove key."""
    if not await store.delete(key):
        raise HTTPException(status_code=404, detail=f"Note not found: {key}")
    logger.info(f"Deleted note {key}")
    return {"success": True, "key": key}


__all__ = ['router']
