from typing import Literal

from pydantic import BaseModel, Field, model_validator

from convenio_core.core.application.dtos.common import Money, UtcDatetime

Target = Literal["titular", "dependente"]


class CreateCouponDTO(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    target: Target
    final_price: Money
    valid_from: UtcDatetime | None = None
    valid_until: UtcDatetime | None = None
    description: str = ""
    is_active: bool = True

    @model_validator(mode="after")
    def _window(self):
        if self.valid_from and self.valid_until and self.valid_until < self.valid_from:
            raise ValueError("valid_until deve ser posterior a valid_from")
        self.code = self.code.strip()
        return self


class UpdateCouponDTO(BaseModel):
    code: str | None = Field(default=None, min_length=1, max_length=50)
    target: Target | None = None
    final_price: Money | None = None
    valid_from: UtcDatetime | None = None
    valid_until: UtcDatetime | None = None
    description: str | None = None
    is_active: bool | None = None


class ResolveCouponDTO(BaseModel):
    code: str = Field(min_length=1)
    target: Target
