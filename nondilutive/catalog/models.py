from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from nondilutive.collection.generations import GenerationDefinition


class GenerationSpec(BaseModel):
    """One generation definition as declared in a catalog file."""

    model_config = ConfigDict(extra="forbid")

    generation_id: int = Field(..., ge=1, description="Generation 0 is built in and cannot be declared.")
    base_uri: str = Field(..., min_length=1, description="Metadata prefix for revealed tokens.")
    downgrade_locked: bool = Field(default=False)
    toggleable: bool = Field(default=True)
    payable_upgrade: bool = Field(default=False)
    price: int = Field(default=0, ge=0, description="Smallest currency units.")
    capacity: int = Field(default=0, ge=0, description="Reserved; stored only.")
    reveal_count: int | None = Field(
        default=None, ge=0, description="When set, the reveal threshold is applied right after loading."
    )

    @model_validator(mode="after")
    def _price_requires_payable(self) -> "GenerationSpec":
        if self.price and not self.payable_upgrade:
            raise ValueError("price is only meaningful when payable_upgrade is true")
        return self

    def to_definition(self) -> GenerationDefinition:
        return GenerationDefinition(
            generation_id=self.generation_id,
            base_uri=self.base_uri,
            downgrade_locked=self.downgrade_locked,
            toggleable=self.toggleable,
            payable_upgrade=self.payable_upgrade,
            price=self.price,
            capacity=self.capacity,
        )
