"""
Shared request dependencies.

Authentication lives outside this service: an upstream layer
resolves the session and forwards the owner id in a header.
Every ledger read and write is scoped by that id.
"""

from fastapi import Header, HTTPException


def get_owner_id(x_user_id: str | None = Header(default=None)) -> str:
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id.strip()
