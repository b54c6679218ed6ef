"""
API routes for the txvault gateway.

Records are sealed with the master key held in app state and
persisted through the configured store. Envelope failures are turned
into 400 responses by the handler registered in app.py.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from txvault.utils.logging import get_logger

logger = get_logger("router")

tx_router = APIRouter(tags=["tx"])


class EncryptRequest(BaseModel):
    party_id: str = Field(alias="partyId", min_length=1)
    payload: Any


def _not_found() -> JSONResponse:
    return JSONResponse({"error": "not_found"}, status_code=404)


@tx_router.post("/tx/encrypt")
async def encrypt_tx(request: Request, body: EncryptRequest) -> Any:
    """Seal a payload, store the record and return it."""
    master_key = request.app.state.master_key
    store = request.app.state.store

    try:
        fields = master_key.seal(body.party_id, body.payload)
    except ValueError:
        # NaN and Infinity parse from the body but are not JSON
        return JSONResponse({"error": "invalid_input"}, status_code=400)
    record = {
        "id": str(uuid.uuid4()),
        "createdAt": datetime.now(UTC).isoformat(),
        **fields,
    }
    store.put(record)
    logger.info("tx_encrypted", tx_id=record["id"], party_id=body.party_id)
    return record


@tx_router.get("/tx/{tx_id}")
async def get_tx(request: Request, tx_id: str) -> Any:
    """Return the stored (still sealed) record."""
    record = request.app.state.store.get(tx_id)
    if record is None:
        return _not_found()
    return record


@tx_router.post("/tx/{tx_id}/decrypt")
async def decrypt_tx(request: Request, tx_id: str) -> Any:
    """Open a stored record and return its payload."""
    record = request.app.state.store.get(tx_id)
    if record is None:
        return _not_found()

    payload = request.app.state.master_key.open(record)
    logger.info("tx_decrypted", tx_id=tx_id)
    return {"id": record["id"], "partyId": record["partyId"], "payload": payload}
