# storefront/admin/product_admin.py
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional, Tuple, Union

from ..notify import Notifier
from ..records import ProductRecord
from .catalog import ProductRepository
from .forms import MAX_IMAGE_BYTES, ImageUpload, check_image_size, validate_product_form
from .guard import ConfirmationRequired, InFlightGuard

NEW_PRODUCT_KEY = "new"


@dataclass(frozen=True)
class ProductCatalogState:
    products: Tuple[ProductRecord, ...] = ()
    loading: bool = False
    load_error: bool = False
    loaded: bool = False
    selected_id: Optional[int] = None

    @property
    def selected(self) -> Optional[ProductRecord]:
        if self.selected_id is None:
            return None
        return next((p for p in self.products if p.id == self.selected_id), None)


@dataclass(frozen=True)
class ProductsLoadStarted:
    pass


@dataclass(frozen=True)
class ProductsLoaded:
    products: Tuple[ProductRecord, ...]


@dataclass(frozen=True)
class ProductsLoadFailed:
    message: str


@dataclass(frozen=True)
class ProductSelected:
    product_id: int


@dataclass(frozen=True)
class SelectionCleared:
    pass


@dataclass(frozen=True)
class ProductSaved:
    product: ProductRecord


@dataclass(frozen=True)
class ProductRemoved:
    product_id: int


Action = Union[
    ProductsLoadStarted,
    ProductsLoaded,
    ProductsLoadFailed,
    ProductSelected,
    SelectionCleared,
    ProductSaved,
    ProductRemoved,
]


def reduce(state: ProductCatalogState, action: Action) -> ProductCatalogState:
    if isinstance(action, ProductsLoadStarted):
        return replace(state, loading=True, load_error=False)

    if isinstance(action, ProductsLoaded):
        return replace(state, products=tuple(action.products), loading=False, loaded=True)

    if isinstance(action, ProductsLoadFailed):
        return replace(state, products=(), loading=False, load_error=True, loaded=True, selected_id=None)

    if isinstance(action, ProductSelected):
        if not any(p.id == action.product_id for p in state.products):
            raise KeyError(action.product_id)
        return replace(state, selected_id=action.product_id)

    if isinstance(action, SelectionCleared):
        return replace(state, selected_id=None)

    if isinstance(action, ProductSaved):
        saved = action.product
        if any(p.id == saved.id for p in state.products):
            products = tuple(saved if p.id == saved.id else p for p in state.products)
        else:
            products = state.products + (saved,)
        return replace(state, products=products, selected_id=None)

    if isinstance(action, ProductRemoved):
        return replace(
            state,
            products=tuple(p for p in state.products if p.id != action.product_id),
            selected_id=None if state.selected_id == action.product_id else state.selected_id,
        )

    raise TypeError(f"Unhandled action {action!r}")


class ProductCatalogViewModel:
    def __init__(
        self,
        repository: ProductRepository,
        notifier: Notifier,
        max_image_bytes: int = MAX_IMAGE_BYTES,
        guard: InFlightGuard | None = None,
    ):
        self.repository = repository
        self.notifier = notifier
        self.max_image_bytes = max_image_bytes
        self.guard = guard or InFlightGuard()
        self.state = ProductCatalogState()

    def dispatch(self, action: Action) -> ProductCatalogState:
        self.state = reduce(self.state, action)
        return self.state

    def refresh(self) -> bool:
        self.dispatch(ProductsLoadStarted())
        products, error = self.repository.list_products()
        if error:
            self.dispatch(ProductsLoadFailed(error))
            self.notifier.error("Could not load products", f"Products could not be loaded: {error}")
            return False
        self.dispatch(ProductsLoaded(tuple(products)))
        return True

    def edit(self, product_id: int) -> ProductRecord:
        self.dispatch(ProductSelected(product_id))
        return self.state.selected

    def reset_form(self) -> None:
        self.dispatch(SelectionCleared())

    def save(self, form_data: Mapping[str, Any], image: Optional[ImageUpload] = None) -> Optional[ProductRecord]:
        """
        Validates, uploads the optional image, then inserts or updates the
        selected product. Validation errors raise ProductFormError before any
        call is made; gateway failures are reported as toasts and return None.
        """
        form = validate_product_form(form_data)
        if image is not None:
            check_image_size(image, self.max_image_bytes)

        selected = self.state.selected
        key = selected.id if selected else NEW_PRODUCT_KEY

        with self.guard.hold(("product", key)):
            record = form.to_record()
            if selected and "image_url" not in form_data:
                record["image_url"] = selected.image_url
            if image is not None:
                self.notifier.notify("Uploading image", "Please wait while the image uploads...")
                url, error = self.repository.upload_image(image)
                if error:
                    self.notifier.error("Could not upload image", f"The image could not be uploaded. {error}")
                    return None
                record["image_url"] = url
                self.notifier.notify("Image uploaded", "The image was uploaded.")

            if selected:
                error = self.repository.update_product(selected.id, record)
                saved = None if error else ProductRecord.model_validate({**record, "id": selected.id})
            else:
                saved, error = self.repository.insert_product(record)

        if error or saved is None:
            # an image uploaded above stays in the bucket; nothing points at it
            self.notifier.error("Could not save product", f"The product could not be saved: {error}")
            return None

        self.dispatch(ProductSaved(saved))
        if selected:
            self.notifier.notify("Product updated", "The product was updated.")
        else:
            self.notifier.notify("Product added", "The product was added.")
        return saved

    def delete(self, product_id: int, confirmed: bool = False) -> bool:
        if not confirmed:
            raise ConfirmationRequired(f"Confirm deletion of product {product_id}")

        with self.guard.hold(("product", product_id)):
            error = self.repository.delete_product(product_id)

        if error:
            self.notifier.error("Could not delete product", "The product could not be deleted.")
            return False

        self.dispatch(ProductRemoved(product_id))
        self.notifier.notify("Product deleted", "The product was deleted.")
        return True
