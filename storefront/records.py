# storefront/records.py
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OrderStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


ICON_NAMES = ("Code", "ShoppingBag", "Map", "Palette", "Brain")
DEFAULT_ICON = "Code"


def _coerce_price(v: Any) -> float:
    if v is None or v == "":
        return 0.0
    if isinstance(v, str):
        return float(v.strip())
    return float(v)


class OrderRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    order_id: str
    product_name: Optional[str] = None
    price: float = 0.0
    discord_username: Optional[str] = None
    email: Optional[str] = None
    # other clients write to this column too; unknown values are kept verbatim
    status: Union[OrderStatus, str] = Field(default=OrderStatus.PENDING, union_mode="left_to_right")
    message: Optional[str] = None

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, v: Any) -> float:
        return _coerce_price(v)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return OrderStatus.PENDING
        return v

    @property
    def status_label(self) -> str:
        return self.status.value if isinstance(self.status, OrderStatus) else self.status

    def with_status(self, status: OrderStatus) -> "OrderRecord":
        return self.model_copy(update={"status": OrderStatus(status)})

    def search_fields(self) -> list[str]:
        return [
            f
            for f in (self.order_id, self.product_name, self.discord_username, self.email)
            if f
        ]


class ProductRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    name: str
    description: str = ""
    price: float = 0.0
    category: str = ""
    icon_name: Optional[str] = None
    image_url: Optional[str] = None

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, v: Any) -> float:
        return _coerce_price(v)

    @property
    def display_icon(self) -> str:
        # stored value is left untouched, only the rendering falls back
        return self.icon_name if self.icon_name in ICON_NAMES else DEFAULT_ICON


def order_from_row(row: Dict[str, Any]) -> OrderRecord:
    return OrderRecord.model_validate(row)


def product_from_row(row: Dict[str, Any]) -> ProductRecord:
    return ProductRecord.model_validate(row)
