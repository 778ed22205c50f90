"""
Business logic for the tenant storefront catalog.

Products belong to the tenant that created them; the stock status is
always derived from the quantity and never set directly.
"""

from typing import List, Optional

import pandas as pd
import structlog

from infrastructure.audit import audit_action
from infrastructure.clients.backend import BackendClient, TableQuery
from infrastructure.configuration import Settings
from infrastructure.identity import User
from infrastructure.operations import OperationResult
from packages.storefront.schemas import (
    Product,
    ProductCreate,
    ProductFilters,
    ProductStatus,
    StockStatus,
)
from utils.slugs import slugify

logger = structlog.get_logger()

PRODUCTS_TABLE = "products"

CATALOG_COLUMNS = [
    "name",
    "sku",
    "category",
    "price",
    "cost_price",
    "margin_percent",
    "stock_quantity",
    "stock_status",
    "status",
]


def stock_status_for(quantity: int, low_stock_threshold: int) -> StockStatus:
    if quantity <= 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= low_stock_threshold:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def margin_percent(price: float, cost_price: Optional[float]) -> Optional[float]:
    """Gross margin as a percentage of the sale price, rounded to 0.1.

    None when the cost is unknown or the price is zero.
    """
    if cost_price is None or not price:
        return None
    return round((price - cost_price) / price * 100, 1)


def _first_product(result: OperationResult, missing: str) -> OperationResult:
    if not result.is_success:
        return result
    if not result.data:
        return OperationResult.not_found(missing)
    return OperationResult.success(data=Product.model_validate(result.data[0]))


def create_product(
    backend: BackendClient, user: User, settings: Settings, request: ProductCreate
) -> OperationResult:
    values = request.model_dump(mode="json")
    values.update(
        repairer_id=user.id,
        slug=slugify(request.name),
        stock_status=stock_status_for(
            request.stock_quantity, settings.storefront.LOW_STOCK_THRESHOLD
        ).value,
    )

    result = _first_product(backend.insert(PRODUCTS_TABLE, values), "Produit non créé")
    if not result.is_success:
        logger.warning("product_create_failed", error=result.message)
        return result

    product: Product = result.data
    audit_action(
        backend, user, "create", "product", product.id,
        details={"name": product.name, "sku": product.sku},
        table=settings.audit.AUDIT_TABLE,
    )
    logger.info("product_created", product_id=product.id, stock_status=product.stock_status.value)
    return OperationResult.success(data=product, message="Produit créé")


def list_products(backend: BackendClient, user: User) -> OperationResult:
    """The tenant's products, newest first."""
    result = backend.select(
        PRODUCTS_TABLE,
        TableQuery().eq("repairer_id", user.id).order("created_at", ascending=False),
    )
    if not result.is_success:
        return result
    return OperationResult.success(data=[Product.model_validate(row) for row in result.data])


def filter_products(products: List[Product], filters: ProductFilters) -> List[Product]:
    """Case-insensitive search on name or SKU, plus an exact status match.

    A status of ``all`` (or none) keeps every product.
    """
    term = (filters.search or "").strip().lower()
    selected = []
    for product in products:
        if term and term not in product.name.lower() and term not in (product.sku or "").lower():
            continue
        if filters.status and filters.status != "all" and product.status.value != filters.status:
            continue
        selected.append(product)
    return selected


def _update(
    backend: BackendClient,
    user: User,
    settings: Settings,
    product_id: str,
    values: dict,
) -> OperationResult:
    result = _first_product(
        backend.update(
            PRODUCTS_TABLE,
            values,
            TableQuery().eq("id", product_id).eq("repairer_id", user.id),
        ),
        "Produit introuvable",
    )
    if result.is_success:
        audit_action(
            backend, user, "update", "product", product_id,
            details=values, table=settings.audit.AUDIT_TABLE,
        )
    return result


def update_product_status(
    backend: BackendClient,
    user: User,
    settings: Settings,
    product_id: str,
    status: ProductStatus,
) -> OperationResult:
    return _update(backend, user, settings, product_id, {"status": status.value})


def update_stock(
    backend: BackendClient,
    user: User,
    settings: Settings,
    product_id: str,
    quantity: int,
) -> OperationResult:
    """Set the quantity and recompute the stock status."""
    status = stock_status_for(quantity, settings.storefront.LOW_STOCK_THRESHOLD)
    return _update(
        backend,
        user,
        settings,
        product_id,
        {"stock_quantity": quantity, "stock_status": status.value},
    )


def delete_product(
    backend: BackendClient, user: User, settings: Settings, product_id: str
) -> OperationResult:
    result = backend.delete(
        PRODUCTS_TABLE, TableQuery().eq("id", product_id).eq("repairer_id", user.id)
    )
    if not result.is_success:
        return result
    if not result.data:
        return OperationResult.not_found("Produit introuvable")
    audit_action(backend, user, "delete", "product", product_id, table=settings.audit.AUDIT_TABLE)
    return OperationResult.success(message="Produit supprimé")


def catalog_to_csv(products: List[Product]) -> str:
    """Render the catalog as CSV, one row per product, header always present."""
    rows = [
        {
            "name": product.name,
            "sku": product.sku,
            "category": product.category,
            "price": product.price,
            "cost_price": product.cost_price,
            "margin_percent": margin_percent(product.price, product.cost_price),
            "stock_quantity": product.stock_quantity,
            "stock_status": product.stock_status.value,
            "status": product.status.value,
        }
        for product in products
    ]
    return pd.DataFrame(rows, columns=CATALOG_COLUMNS).to_csv(index=False, lineterminator="\n")


def export_catalog(
    backend: BackendClient, user: User, filters: Optional[ProductFilters] = None
) -> OperationResult:
    result = list_products(backend, user)
    if not result.is_success:
        return result
    products = filter_products(result.data, filters or ProductFilters())
    logger.info("catalog_exported", rows=len(products))
    return OperationResult.success(
        data=catalog_to_csv(products), message=f"{len(products)} rows exported"
    )
