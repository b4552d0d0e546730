# storefront/models.py
from __future__ import annotations

from sqlalchemy import Column, Float, Integer, String, Text

from .db import Base


class Product(Base):
    __tablename__ = "products"
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Float, nullable=False, default=0.0)
    category = Column(String, nullable=False)
    icon_name = Column(String, nullable=True)  # free text; display falls back to "Code"
    image_url = Column(String, nullable=True)


class Order(Base):
    __tablename__ = "orders"
    id = Column(Integer, primary_key=True)
    order_id = Column(String, unique=True, index=True, nullable=False)
    product_name = Column(String, nullable=True)  # snapshot at order time
    price = Column(Float, nullable=True)  # snapshot at order time
    discord_username = Column(String, nullable=True)
    email = Column(String, nullable=True)
    status = Column(String, default="Pending")  # Pending | Completed | Cancelled
    message = Column(Text, nullable=True)
