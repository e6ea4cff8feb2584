from __future__ import annotations

from fastapi import HTTPException, Request, status

from nondilutive.collection.contract import NonDilutiveCollection


def get_collection(request: Request) -> NonDilutiveCollection:
    return request.app.state.collection


def get_caller(request: Request) -> str:
    """
    Caller identity for state-changing routes (X-Caller header).

    Identity verification belongs to the gateway in front of this service.
    """
    caller = (request.headers.get("X-Caller") or "").strip()
    if not caller:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing X-Caller header")
    return caller
