"""Medication cart models."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

_CENTS = Decimal("0.01")


class CartItem(BaseModel):
    """Medication queued for purchase; ``name`` is unique within a cart."""

    name: str = Field(min_length=1)
    dosage: str = Field(default="")
    frequency: str = Field(default="")
    duration: str = Field(default="")
    price: Decimal = Field(default=Decimal("0"), ge=0, max_digits=15, decimal_places=2)
    quantity: int = Field(default=1, ge=1)

    model_config = ConfigDict(frozen=True)

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("quantity", mode="before")
    @classmethod
    def _default_quantity(cls, value):
        # stored carts may omit quantity or carry 0/null; both read as a single unit
        if value is None or value == 0 or value == "":
            return 1
        return value

    @field_validator("price", mode="before")
    @classmethod
    def _price_from_float(cls, value):
        if isinstance(value, float):
            return Decimal(repr(value))
        return value

    # at most 15 significant digits, so the float written to JSON reads back exactly
    @field_serializer("price", when_used="json")
    def _price_to_json(self, value: Decimal) -> float:
        return float(value)


class CartTotals(BaseModel):
    """Order summary for a cart snapshot; amounts are exact, not rounded."""

    subtotal: Decimal
    tax: Decimal
    total: Decimal

    model_config = ConfigDict(frozen=True)

    def display(self) -> dict[str, str]:
        """Return the amounts rounded half-up to cents."""

        return {
            name: str(getattr(self, name).quantize(_CENTS, rounding=ROUND_HALF_UP))
            for name in ("subtotal", "tax", "total")
        }


__all__ = ["CartItem", "CartTotals"]
