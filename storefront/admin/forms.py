# storefront/admin/forms.py
from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ValidationError, field_validator

from ..records import DEFAULT_ICON, ICON_NAMES

MAX_IMAGE_BYTES = 5 * 1024 * 1024

# digits, one optional point, at most two decimals
_PRICE_RE = re.compile(r"^\d*\.?\d{0,2}$")

_REQUIRED = ("name", "description", "price", "category")


class ProductFormError(Exception):
    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))


@dataclass(frozen=True)
class ImageUpload:
    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        ext = re.sub(r"[^a-z0-9]", "", self.filename.rsplit(".", 1)[-1].lower())
        return ext or "bin"


def check_image_size(image: ImageUpload, limit: int = MAX_IMAGE_BYTES) -> None:
    if image.size > limit:
        mb = limit / (1024 * 1024)
        raise ProductFormError({"image": f"Image must not exceed {mb:g} MB"})


class ProductForm(BaseModel):
    name: str = ""
    description: str = ""
    price: str = ""
    category: str = ""
    icon_name: str = DEFAULT_ICON
    image_url: Optional[str] = None

    @field_validator("name", "description", "category", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> str:
        return str(v or "").strip()

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, v: Any) -> str:
        raw = str(v if v is not None else "").strip()
        if not raw:
            return raw
        if not _PRICE_RE.match(raw):
            raise ValueError("Price must be a non-negative number with at most two decimals")
        try:
            Decimal(raw)
        except InvalidOperation:
            raise ValueError("Price must be a number")
        return raw

    @field_validator("icon_name", mode="before")
    @classmethod
    def _icon(cls, v: Any) -> str:
        v = str(v or "").strip() or DEFAULT_ICON
        if v not in ICON_NAMES:
            raise ValueError(f"Icon must be one of: {', '.join(ICON_NAMES)}")
        return v

    @field_validator("image_url", mode="before")
    @classmethod
    def _image_url(cls, v: Any) -> Optional[str]:
        if not v:
            return None
        return str(v).strip() or None

    def to_record(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "price": float(Decimal(self.price)),
            "category": self.category,
            "icon_name": self.icon_name,
            "image_url": self.image_url,
        }


def validate_product_form(data: Mapping[str, Any]) -> ProductForm:
    """Client-side checks; raises ProductFormError before any network call."""
    errors: Dict[str, str] = {
        k: "This field is required" for k in _REQUIRED if data.get(k) is None or not str(data.get(k)).strip()
    }
    try:
        form = ProductForm.model_validate(dict(data))
    except ValidationError as e:
        for err in e.errors():
            field = str(err["loc"][0]) if err.get("loc") else "form"
            msg = str(err.get("msg", "Invalid value"))
            errors.setdefault(field, msg.removeprefix("Value error, "))
        raise ProductFormError(errors) from e

    if errors:
        raise ProductFormError(errors)
    return form
