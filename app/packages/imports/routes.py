"""FastAPI routes for CSV imports (administrators only)."""

from typing import List

from fastapi import APIRouter, File, UploadFile

from infrastructure.operations.http import raise_for_result
from infrastructure.services import AdminUserDep, SettingsDep, TenantBackendDep
from packages.imports import service
from packages.imports.schemas import (
    ImportPreview,
    ImportRequest,
    ImportResult,
    ImportTarget,
    TargetColumn,
)

router = APIRouter(prefix="/imports", tags=["imports"])


@router.get("/targets/{target}/columns", response_model=List[TargetColumn])
def get_target_columns(target: ImportTarget, admin: AdminUserDep) -> List[TargetColumn]:
    return service.TARGET_COLUMNS[target]


@router.post("/preview", response_model=ImportPreview)
def post_preview(
    admin: AdminUserDep,
    settings: SettingsDep,
    target: ImportTarget = ImportTarget.REPAIRERS,
    file: UploadFile = File(...),
) -> ImportPreview:
    """Parse the file and propose a mapping for every target column."""
    result = service.parse_csv(file.file.read(), max_rows=settings.imports.IMPORT_MAX_ROWS)
    raise_for_result(result)

    parsed = result.data
    mappings = service.auto_map_columns(
        parsed.headers, parsed.preview, target, settings.imports.IMPORT_SIMILARITY_THRESHOLD
    )
    return ImportPreview(
        parsed=parsed,
        mappings=mappings,
        missing_required=service.missing_required_columns(mappings),
    )


@router.post("/run", response_model=ImportResult)
def post_run(
    request: ImportRequest,
    admin: AdminUserDep,
    backend: TenantBackendDep,
    settings: SettingsDep,
) -> ImportResult:
    result = service.run_import(backend, admin, settings, request)
    raise_for_result(result)
    return result.data
