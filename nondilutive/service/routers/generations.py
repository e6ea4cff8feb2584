from __future__ import annotations

from fastapi import APIRouter, Depends

from nondilutive.collection.contract import NonDilutiveCollection

from ..deps import get_caller, get_collection
from ..models import GenerationOut, LoadGenerationRequest, RevealRequest, ToggleResult

router = APIRouter(prefix="/generations", tags=["generations"])


@router.get("", response_model=list[GenerationOut])
def list_generations(collection: NonDilutiveCollection = Depends(get_collection)):
    return [GenerationOut(**g.to_dict()) for g in collection.generations()]


@router.get("/{generation_id}", response_model=GenerationOut)
def get_generation(generation_id: int, collection: NonDilutiveCollection = Depends(get_collection)):
    return GenerationOut(**collection.generation(generation_id).to_dict())


@router.post("", response_model=GenerationOut, status_code=201)
def load_generation(
    payload: LoadGenerationRequest,
    caller: str = Depends(get_caller),
    collection: NonDilutiveCollection = Depends(get_collection),
):
    view = collection.load_generation(
        payload.generation_id,
        payload.downgrade_locked,
        payload.toggleable,
        payload.payable_upgrade,
        payload.price,
        payload.capacity,
        payload.base_uri,
        caller=caller,
    )
    return GenerationOut(**view.to_dict())


@router.post("/{generation_id}/toggle", response_model=ToggleResult)
def toggle_generation(
    generation_id: int,
    caller: str = Depends(get_caller),
    collection: NonDilutiveCollection = Depends(get_collection),
):
    enabled = collection.toggle_generation(generation_id, caller=caller)
    return ToggleResult(generation_id=generation_id, enabled=enabled)


@router.post("/{generation_id}/reveal", response_model=GenerationOut)
def reveal_generation(
    generation_id: int,
    payload: RevealRequest,
    caller: str = Depends(get_caller),
    collection: NonDilutiveCollection = Depends(get_collection),
):
    collection.set_revealed(generation_id, payload.count, caller=caller)
    return GenerationOut(**collection.generation(generation_id).to_dict())
