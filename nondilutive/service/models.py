from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class MintRequest(BaseModel):
    quantity: int = Field(..., ge=1)
    value: int = Field(default=0, ge=0, description="Attached payment, smallest currency units.")


class MintResult(BaseModel):
    token_ids: list[int]
    total_supply: int


class LoadGenerationRequest(BaseModel):
    # Field order mirrors load_generation's positional parameters.
    generation_id: int = Field(..., ge=0)
    downgrade_locked: bool
    toggleable: bool
    payable_upgrade: bool
    price: int = Field(default=0, ge=0)
    capacity: int = Field(default=0, ge=0)
    base_uri: str = Field(..., min_length=1)


class RevealRequest(BaseModel):
    count: int = Field(..., ge=0)


class FocusRequest(BaseModel):
    generation_id: int = Field(..., ge=0)
    value: int = Field(default=0, ge=0)


class GenerationOut(BaseModel):
    generation_id: int
    base_uri: str
    downgrade_locked: bool
    toggleable: bool
    payable_upgrade: bool
    price: int
    capacity: int
    enabled: bool
    toggled: bool
    revealed_threshold: int
    reveal_set: bool


class ToggleResult(BaseModel):
    generation_id: Optional[int] = None
    enabled: bool


class FocusResult(BaseModel):
    token_id: int
    from_generation: int
    to_generation: int
    downgrade_floor: Optional[int] = None
    token_uri: str


class CollectionInfo(BaseModel):
    name: str
    symbol: str
    admin: str
    cost: int
    max_supply: int
    total_supply: int
    mint_open: bool
    unrevealed_uri: str
    flag_policy: str
    treasury_balance: int


class WithdrawResult(BaseModel):
    to: str
    amount: int
