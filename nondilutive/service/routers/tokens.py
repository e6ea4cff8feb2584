from __future__ import annotations

from fastapi import APIRouter, Depends

from nondilutive.collection.contract import NonDilutiveCollection

from ..deps import get_caller, get_collection
from ..models import FocusRequest, FocusResult

router = APIRouter(prefix="/tokens", tags=["tokens"])


@router.get("/{token_id}/uri")
def token_uri(token_id: int, collection: NonDilutiveCollection = Depends(get_collection)) -> dict:
    return {"token_id": token_id, "token_uri": collection.token_uri(token_id)}


@router.get("/{token_id}/generation")
def token_generation(token_id: int, collection: NonDilutiveCollection = Depends(get_collection)) -> dict:
    return {"token_id": token_id, "generation_id": collection.get_token_generation(token_id)}


@router.post("/{token_id}/focus", response_model=FocusResult)
def focus_generation(
    token_id: int,
    payload: FocusRequest,
    caller: str = Depends(get_caller),
    collection: NonDilutiveCollection = Depends(get_collection),
):
    t = collection.focus_generation(payload.generation_id, token_id, caller=caller, value=payload.value)
    return FocusResult(
        token_id=t.token_id,
        from_generation=t.from_generation,
        to_generation=t.to_generation,
        downgrade_floor=t.downgrade_floor,
        token_uri=collection.token_uri(token_id),
    )
