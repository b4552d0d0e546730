# storefront/admin/catalog.py
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from ..gateway import SqlGateway
from ..records import ProductRecord, product_from_row
from ..storage import BucketStorage
from .forms import ImageUpload

TABLE = "products"
IMAGES_BUCKET = "product-images"


class ProductRepository:
    def __init__(self, gateway: SqlGateway, storage: BucketStorage, bucket: str = IMAGES_BUCKET):
        self.gateway = gateway
        self.storage = storage
        self.bucket = bucket

    def list_products(self) -> Tuple[List[ProductRecord], Optional[str]]:
        res = self.gateway.select(TABLE, order="id", ascending=True)
        if not res.ok:
            return [], res.error
        return [product_from_row(r) for r in (res.data or [])], None

    def get_product(self, product_id: int) -> Tuple[Optional[ProductRecord], Optional[str]]:
        res = self.gateway.select(TABLE, {"id": product_id})
        if not res.ok:
            return None, res.error
        rows = res.data or []
        return (product_from_row(rows[0]) if rows else None), None

    def insert_product(self, data: Dict[str, Any]) -> Tuple[Optional[ProductRecord], Optional[str]]:
        res = self.gateway.insert(TABLE, data)
        if not res.ok:
            return None, res.error
        return product_from_row(res.data), None

    def update_product(self, product_id: int, data: Dict[str, Any]) -> Optional[str]:
        return self.gateway.update(TABLE, data, {"id": product_id}).error

    def delete_product(self, product_id: int) -> Optional[str]:
        return self.gateway.delete(TABLE, {"id": product_id}).error

    def upload_image(self, image: ImageUpload) -> Tuple[Optional[str], Optional[str]]:
        """Stores the file under a fresh unique name; returns (public_url, error)."""
        path = f"{uuid4()}.{image.extension}"
        error = self.storage.upload(self.bucket, path, image.content, cache_control="3600", upsert=True)
        if error:
            return None, error
        return self.storage.get_public_url(self.bucket, path), None
