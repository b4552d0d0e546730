# storefront/main.py
from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from fastapi import Cookie, Depends, FastAPI, File, Form, Header, HTTPException, Response, UploadFile
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, EmailStr

# Load .env locally (safe in prod too)
from dotenv import load_dotenv

load_dotenv()

from .admin.catalog import IMAGES_BUCKET, ProductRepository
from .admin.forms import MAX_IMAGE_BYTES, ImageUpload, ProductFormError
from .admin.guard import ConfirmationRequired, InFlightGuard, MutationInProgress
from .admin.order_review import OrderReviewViewModel
from .admin.orders import OrderRepository
from .admin.presenters import present_order_review, present_product_admin, present_product_card
from .admin.product_admin import ProductCatalogViewModel
from .auth import check_staff_credentials, issue_staff_token, staff_from_token, staff_password_hash
from .db import engine
from .gateway import SqlGateway
from .notify import Notifier
from .records import OrderStatus
from .sessions import SESSION_TTL_SECONDS, AdminSession, SessionRegistry
from .shop import OrderSubmissionFailed, ProductNotFound, submit_order
from .storage import BucketStorage

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def _log_level(default: str = "INFO") -> str:
    name = os.getenv("LOG_LEVEL", default).strip().upper()
    return name if isinstance(logging.getLevelName(name), int) else default


logging.basicConfig(
    level=_log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# -------------------
# Config (env-driven)
# -------------------
def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


class Settings(BaseModel):
    storage_dir: str = os.getenv("STORAGE_DIR", str(PROJECT_ROOT / "storage"))
    public_base_url: str = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000")
    images_bucket: str = os.getenv("PRODUCT_IMAGES_BUCKET", IMAGES_BUCKET)
    max_image_bytes: int = _int_env("MAX_IMAGE_BYTES", MAX_IMAGE_BYTES)

    admin_email: str = os.getenv("ADMIN_EMAIL", "admin@example.com").strip().lower()
    admin_password_hash: str = staff_password_hash()

    currency_symbol: str = os.getenv("CURRENCY_SYMBOL", "$")
    log_level: str = _log_level()


settings = Settings()

app = FastAPI(
    title="Storefront Admin API",
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)

gateway = SqlGateway(engine)
gateway.create_all()

Path(settings.storage_dir).mkdir(parents=True, exist_ok=True)
storage = BucketStorage(settings.storage_dir, settings.public_base_url)
app.mount("/storage", StaticFiles(directory=settings.storage_dir, check_dir=False), name="storage")


def build_session_registry(gw: SqlGateway, store: BucketStorage, cfg: Settings) -> SessionRegistry:
    def factory(session_id: str) -> AdminSession:
        notifier = Notifier()
        guard = InFlightGuard()
        return AdminSession(
            session_id=session_id,
            orders=OrderReviewViewModel(OrderRepository(gw), notifier, guard),
            products=ProductCatalogViewModel(
                ProductRepository(gw, store, cfg.images_bucket),
                notifier,
                cfg.max_image_bytes,
                guard,
            ),
            notifier=notifier,
            guard=guard,
        )

    return SessionRegistry(factory)


sessions = build_session_registry(gateway, storage, settings)


# -------------------
# Schemas
# -------------------
class LoginIn(BaseModel):
    email: EmailStr
    password: str


class OrderIn(BaseModel):
    product_id: int
    discord_username: str | None = None
    email: EmailStr | None = None
    message: str | None = None


class StatusIn(BaseModel):
    status: OrderStatus


# -------------------
# Dependencies
# -------------------
def get_gateway() -> SqlGateway:
    return gateway


def get_storage() -> BucketStorage:
    return storage


def get_sessions() -> SessionRegistry:
    return sessions


def get_settings() -> Settings:
    return settings


def require_staff(authorization: str | None = Header(default=None)) -> str:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Missing Bearer token")

    token = authorization.split(" ", 1)[1].strip()
    email = staff_from_token(token)
    if not email:
        raise HTTPException(status_code=401, detail="Invalid token")
    return email


def require_admin_session(
    response: Response,
    staff: str = Depends(require_staff),
    registry: SessionRegistry = Depends(get_sessions),
    admin_session: str | None = Cookie(default=None, alias="admin_session"),
) -> AdminSession:
    """Each browser keeps its own in-memory view state, keyed by a cookie."""
    session = registry.get_or_create(admin_session)
    response.set_cookie(
        key="admin_session",
        value=session.session_id,
        httponly=True,
        samesite="lax",
        max_age=SESSION_TTL_SECONDS,
    )
    return session


# -------------------
# Helpers
# -------------------
@contextmanager
def _command_errors() -> Iterator[None]:
    try:
        yield
    except ConfirmationRequired as e:
        raise HTTPException(status_code=409, detail=e.message)
    except MutationInProgress as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ProductFormError as e:
        raise HTTPException(status_code=422, detail={"errors": e.errors})


def _orders_payload(session: AdminSession, cfg: Settings, ok: bool = True) -> Dict[str, Any]:
    return {
        "ok": ok,
        "view": present_order_review(session.orders.state, cfg.currency_symbol),
        "toasts": [t.to_dict() for t in session.notifier.drain()],
    }


def _products_payload(session: AdminSession, cfg: Settings, ok: bool = True) -> Dict[str, Any]:
    return {
        "ok": ok,
        "view": present_product_admin(session.products.state, cfg.currency_symbol),
        "toasts": [t.to_dict() for t in session.notifier.drain()],
    }


def _image_from_upload(image: Optional[UploadFile], limit: int) -> Optional[ImageUpload]:
    if image is None or not image.filename:
        return None
    # one byte past the limit is enough for the size check to reject it
    content = image.file.read(limit + 1)
    return ImageUpload(filename=image.filename, content=content, content_type=image.content_type)


# -------------------
# Health
# -------------------
@app.get("/")
def root():
    return {"ok": True, "service": "storefront-api"}


@app.get("/health")
def health(gw: SqlGateway = Depends(get_gateway)):
    connected = gw.ping()
    return {"ok": connected, "gateway": "connected" if connected else "unreachable"}


# -------------------
# Auth
# -------------------
@app.post("/auth/login")
def login(payload: LoginIn, cfg: Settings = Depends(get_settings)):
    if not check_staff_credentials(payload.email, payload.password, cfg.admin_email, cfg.admin_password_hash):
        raise HTTPException(status_code=401, detail="Bad credentials")
    return {"token": issue_staff_token(cfg.admin_email)}


# -------------------
# Storefront (customers)
# -------------------
@app.get("/shop/products")
def shop_products(
    gw: SqlGateway = Depends(get_gateway),
    store: BucketStorage = Depends(get_storage),
    cfg: Settings = Depends(get_settings),
):
    products, error = ProductRepository(gw, store, cfg.images_bucket).list_products()
    if error:
        raise HTTPException(status_code=503, detail="Catalog is unavailable")
    return {"products": [present_product_card(p, cfg.currency_symbol) for p in products]}


@app.post("/shop/orders")
def shop_submit_order(
    payload: OrderIn,
    gw: SqlGateway = Depends(get_gateway),
    store: BucketStorage = Depends(get_storage),
    cfg: Settings = Depends(get_settings),
):
    try:
        order = submit_order(
            ProductRepository(gw, store, cfg.images_bucket),
            OrderRepository(gw),
            product_id=payload.product_id,
            discord_username=payload.discord_username,
            email=payload.email,
            message=payload.message,
        )
    except ProductNotFound:
        raise HTTPException(status_code=404, detail="Product not found")
    except OrderSubmissionFailed as e:
        raise HTTPException(status_code=503, detail=f"Order could not be submitted: {e}")
    return {"ok": True, "order_id": order.order_id, "status": order.status.value}


# -------------------
# Admin: order review
# -------------------
@app.get("/admin/orders")
def admin_orders(
    status: str | None = None,
    q: str | None = None,
    session: AdminSession = Depends(require_admin_session),
    cfg: Settings = Depends(get_settings),
):
    vm = session.orders
    if not vm.state.loaded:
        vm.refresh()
    if status is not None:
        try:
            vm.apply_filter(status)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
    if q is not None:
        vm.apply_search(q)
    return _orders_payload(session, cfg)


@app.post("/admin/orders/refresh")
def admin_orders_refresh(
    session: AdminSession = Depends(require_admin_session),
    cfg: Settings = Depends(get_settings),
):
    ok = session.orders.refresh()
    return _orders_payload(session, cfg, ok)


@app.post("/admin/orders/demo")
def admin_orders_demo(
    session: AdminSession = Depends(require_admin_session),
    cfg: Settings = Depends(get_settings),
):
    session.orders.load_demo_data()
    return _orders_payload(session, cfg)


@app.post("/admin/orders/{order_id}/status")
def admin_order_status(
    order_id: str,
    payload: StatusIn,
    session: AdminSession = Depends(require_admin_session),
    cfg: Settings = Depends(get_settings),
):
    with _command_errors():
        ok = session.orders.transition(order_id, payload.status)
    return _orders_payload(session, cfg, ok)


@app.delete("/admin/orders/{order_id}")
def admin_order_delete(
    order_id: str,
    confirm: bool = False,
    session: AdminSession = Depends(require_admin_session),
    cfg: Settings = Depends(get_settings),
):
    with _command_errors():
        ok = session.orders.remove(order_id, confirmed=confirm)
    return _orders_payload(session, cfg, ok)


# -------------------
# Admin: product catalog
# -------------------
@app.get("/admin/products")
def admin_products(
    session: AdminSession = Depends(require_admin_session),
    cfg: Settings = Depends(get_settings),
):
    if not session.products.state.loaded:
        session.products.refresh()
    return _products_payload(session, cfg)


@app.post("/admin/products/refresh")
def admin_products_refresh(
    session: AdminSession = Depends(require_admin_session),
    cfg: Settings = Depends(get_settings),
):
    ok = session.products.refresh()
    return _products_payload(session, cfg, ok)


@app.post("/admin/products/form/reset")
def admin_products_reset_form(
    session: AdminSession = Depends(require_admin_session),
    cfg: Settings = Depends(get_settings),
):
    session.products.reset_form()
    return _products_payload(session, cfg)


@app.post("/admin/products/{product_id}/edit")
def admin_product_edit(
    product_id: int,
    session: AdminSession = Depends(require_admin_session),
    cfg: Settings = Depends(get_settings),
):
    try:
        session.products.edit(product_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Product not found")
    return _products_payload(session, cfg)


@app.post("/admin/products")
def admin_product_save(
    name: str = Form(default=""),
    description: str = Form(default=""),
    price: str = Form(default=""),
    category: str = Form(default=""),
    icon_name: str = Form(default="Code"),
    image_url: str | None = Form(default=None),
    image: UploadFile | None = File(default=None),
    session: AdminSession = Depends(require_admin_session),
    cfg: Settings = Depends(get_settings),
):
    form_data: Dict[str, Any] = {
        "name": name,
        "description": description,
        "price": price,
        "category": category,
        "icon_name": icon_name,
    }
    if image_url is not None:
        form_data["image_url"] = image_url

    with _command_errors():
        saved = session.products.save(form_data, _image_from_upload(image, cfg.max_image_bytes))
    return _products_payload(session, cfg, saved is not None)


@app.delete("/admin/products/{product_id}")
def admin_product_delete(
    product_id: int,
    confirm: bool = False,
    session: AdminSession = Depends(require_admin_session),
    cfg: Settings = Depends(get_settings),
):
    with _command_errors():
        ok = session.products.delete(product_id, confirmed=confirm)
    return _products_payload(session, cfg, ok)
