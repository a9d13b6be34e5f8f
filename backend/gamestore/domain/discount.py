"""
Discount Code Domain Model
"""
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal


DISCOUNT_TYPES = ["percentage", "fixed"]


def normalize_code(code: str) -> str:
    """Codes are matched case-insensitively and stored upper-case"""
    return (code or "").strip().upper()


class DiscountCode(BaseModel):
    """
    Discount code domain model

    Fields:
        code: Code typed at checkout (unique, case-insensitive)
        type: percentage (value is 1-100) or fixed (value in KWD)
        value: Discount amount
        usage_limit: Maximum number of redemptions
        used_count: Redemptions so far
        one_user_only: Each customer e-mail may use the code once
        is_active: Disabled codes are rejected
    """

    id: int
    code: str
    type: str
    value: Decimal
    usage_limit: int = 1
    used_count: int = 0
    one_user_only: bool = False
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(
        from_attributes=True,
        json_encoders={
            Decimal: float,
            datetime: lambda v: v.isoformat()
        }
    )

    @property
    def remaining_uses(self) -> int:
        return max(0, self.usage_limit - self.used_count)

    @property
    def is_exhausted(self) -> bool:
        return self.used_count >= self.usage_limit

    def discount_for(self, subtotal: Decimal) -> Decimal:
        """Amount taken off the given subtotal"""
        if self.type == "percentage":
            return (subtotal * self.value / Decimal("100")).quantize(Decimal("0.001"))
        return self.value

    def to_dict(self) -> dict:
        data = self.model_dump()
        data['value'] = float(self.value)
        data['remaining_uses'] = self.remaining_uses
        return data


class _DiscountRules(BaseModel):

    @model_validator(mode="after")
    def check_percentage(self):
        if self.type == "percentage" and self.value is not None and self.value > 100:
            raise ValueError("Percentage discount cannot exceed 100")
        return self


class DiscountCodeCreate(_DiscountRules):
    code: str = Field(..., min_length=2, max_length=50)
    type: str = "percentage"
    value: Decimal = Field(..., gt=0)
    usage_limit: int = Field(1, ge=1)
    one_user_only: bool = False
    is_active: bool = True

    @field_validator("code")
    @classmethod
    def upper_code(cls, v: str) -> str:
        return normalize_code(v)

    @field_validator("type")
    @classmethod
    def check_type(cls, v: str) -> str:
        if v not in DISCOUNT_TYPES:
            raise ValueError(f"Type must be one of: {', '.join(DISCOUNT_TYPES)}")
        return v


class DiscountCodeUpdate(_DiscountRules):
    code: Optional[str] = Field(None, min_length=2, max_length=50)
    type: Optional[str] = None
    value: Optional[Decimal] = Field(None, gt=0)
    usage_limit: Optional[int] = Field(None, ge=1)
    one_user_only: Optional[bool] = None
    is_active: Optional[bool] = None

    @field_validator("code")
    @classmethod
    def upper_code(cls, v: Optional[str]) -> Optional[str]:
        return normalize_code(v) if v is not None else None

    @field_validator("type")
    @classmethod
    def check_type(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in DISCOUNT_TYPES:
            raise ValueError(f"Type must be one of: {', '.join(DISCOUNT_TYPES)}")
        return v


class DiscountValidation(BaseModel):
    """Outcome of checking a code at checkout"""
    code: str
    valid: bool
    reason: Optional[str] = None
    discount: Optional[DiscountCode] = None
