"""FastAPI routes for the storefront package."""

from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from infrastructure.operations.http import raise_for_result
from infrastructure.services import CurrentUserDep, SettingsDep, TenantBackendDep
from packages.storefront import service
from packages.storefront.schemas import (
    Product,
    ProductCreate,
    ProductFilters,
    StatusUpdate,
    StockUpdate,
)

router = APIRouter(prefix="/storefront", tags=["storefront"])


class MessageResponse(BaseModel):
    message: str


@router.get("/products", response_model=List[Product])
def get_products(
    user: CurrentUserDep,
    backend: TenantBackendDep,
    filters: ProductFilters = Depends(),
) -> List[Product]:
    result = service.list_products(backend, user)
    raise_for_result(result)
    return service.filter_products(result.data, filters)


@router.post("/products", response_model=Product, status_code=201)
def post_product(
    request: ProductCreate,
    user: CurrentUserDep,
    backend: TenantBackendDep,
    settings: SettingsDep,
) -> Product:
    result = service.create_product(backend, user, settings, request)
    raise_for_result(result)
    return result.data


@router.get("/products/export")
def export_products(
    user: CurrentUserDep,
    backend: TenantBackendDep,
    filters: ProductFilters = Depends(),
) -> Response:
    result = service.export_catalog(backend, user, filters)
    raise_for_result(result)
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    return Response(
        content=result.data,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="catalogue-{stamp}.csv"'},
    )


@router.patch("/products/{product_id}/status", response_model=Product)
def patch_product_status(
    product_id: str,
    update: StatusUpdate,
    user: CurrentUserDep,
    backend: TenantBackendDep,
    settings: SettingsDep,
) -> Product:
    result = service.update_product_status(backend, user, settings, product_id, update.status)
    raise_for_result(result)
    return result.data


@router.patch("/products/{product_id}/stock", response_model=Product)
def patch_product_stock(
    product_id: str,
    update: StockUpdate,
    user: CurrentUserDep,
    backend: TenantBackendDep,
    settings: SettingsDep,
) -> Product:
    result = service.update_stock(backend, user, settings, product_id, update.stock_quantity)
    raise_for_result(result)
    return result.data


@router.delete("/products/{product_id}", response_model=MessageResponse)
def delete_product(
    product_id: str, user: CurrentUserDep, backend: TenantBackendDep, settings: SettingsDep
) -> MessageResponse:
    result = service.delete_product(backend, user, settings, product_id)
    raise_for_result(result)
    return MessageResponse(message=result.message)
