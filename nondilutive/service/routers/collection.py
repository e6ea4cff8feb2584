from __future__ import annotations

from fastapi import APIRouter, Depends

from nondilutive.collection.contract import NonDilutiveCollection

from ..deps import get_caller, get_collection
from ..models import CollectionInfo, MintRequest, MintResult, ToggleResult, WithdrawResult

router = APIRouter(prefix="/collection", tags=["collection"])


def _info(c: NonDilutiveCollection) -> CollectionInfo:
    return CollectionInfo(
        name=c.name,
        symbol=c.symbol,
        admin=c.admin,
        cost=c.cost,
        max_supply=c.max_supply,
        total_supply=c.total_supply(),
        mint_open=c.mint_open,
        unrevealed_uri=c.unrevealed_uri,
        flag_policy=c.flag_policy.value,
        treasury_balance=c.treasury_balance,
    )


@router.get("", response_model=CollectionInfo)
def get_collection_info(collection: NonDilutiveCollection = Depends(get_collection)):
    return _info(collection)


@router.get("/snapshot")
def get_snapshot(collection: NonDilutiveCollection = Depends(get_collection)) -> dict:
    return collection.snapshot()


@router.post("/toggle-mint", response_model=ToggleResult)
def toggle_mint(
    caller: str = Depends(get_caller),
    collection: NonDilutiveCollection = Depends(get_collection),
):
    return ToggleResult(enabled=collection.toggle_mint(caller=caller))


@router.post("/mint", response_model=MintResult)
def mint(
    payload: MintRequest,
    caller: str = Depends(get_caller),
    collection: NonDilutiveCollection = Depends(get_collection),
):
    token_ids = collection.mint(payload.quantity, caller=caller, value=payload.value)
    return MintResult(token_ids=token_ids, total_supply=collection.total_supply())


@router.post("/withdraw", response_model=WithdrawResult)
def withdraw(
    caller: str = Depends(get_caller),
    collection: NonDilutiveCollection = Depends(get_collection),
):
    amount = collection.withdraw(caller=caller)
    return WithdrawResult(to=collection.admin, amount=amount)
