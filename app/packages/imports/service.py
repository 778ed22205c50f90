"""
CSV import: parsing, header auto-mapping, normalisation and insertion.

Mapping is stateless. The browser (or caller) posts the file once to get a
preview with proposed mappings, adjusts them if needed, then posts the rows
and the final mappings to run the import.
"""

import io
import re
import time
import uuid
from typing import Any, Dict, Iterable, List, Optional, Tuple
from urllib.parse import urlparse

import pandas as pd
import structlog
from email_validator import EmailNotValidError, validate_email

from infrastructure.audit import audit_action
from infrastructure.clients.backend import BackendClient
from infrastructure.configuration import Settings
from infrastructure.identity import User
from infrastructure.operations import OperationResult, OperationStatus
from packages.imports.schemas import (
    ColumnMapping,
    ImportRequest,
    ImportResult,
    ImportTarget,
    ParsedCSV,
    RowError,
    TargetColumn,
)
from packages.storefront.service import PRODUCTS_TABLE, stock_status_for
from utils.slugs import slugify

logger = structlog.get_logger()

SEPARATORS = ("\t", ";", ",")
PREVIEW_ROWS = 5
SPLIT_POSTAL_CITY = "split_postal_city"

POSTAL_CITY_VALUE = re.compile(r"^\d{5}\s+\w+")
POSTAL_CITY_PARTS = re.compile(r"^(\d{5})\s*(.+)$")
POSTAL_CODE_PATTERN = re.compile(r"\d{5}")
PHONE_PATTERN = re.compile(r"^(\+33|0)[1-9]\d{8}$")

TEXT_LIMIT = 200
DESCRIPTION_LIMIT = 1000

PRICE_RANGES = ("low", "medium", "high")
DEFAULT_ADDRESS = "Adresse non renseignée"
DEFAULT_POSTAL_CODE = "00000"
DEFAULT_SERVICES = ["Réparation téléphone"]
DEFAULT_SPECIALTIES = ["Tout mobile"]

TARGET_TABLES = {
    ImportTarget.REPAIRERS: "repairers",
    ImportTarget.PRODUCTS: PRODUCTS_TABLE,
}

TARGET_COLUMNS: Dict[ImportTarget, List[TargetColumn]] = {
    ImportTarget.REPAIRERS: [
        TargetColumn(
            key="name",
            label="Nom",
            required=True,
            patterns=["nom", "name", "titre", "title", "entreprise", "company", "enseigne", "raison"],
        ),
        TargetColumn(
            key="address",
            label="Adresse",
            required=True,
            patterns=["adresse", "address", "rue", "street", "addr", "voie"],
        ),
        TargetColumn(
            key="phone",
            label="Téléphone",
            patterns=["tel", "phone", "telephone", "mobile", "gsm", "portable"],
        ),
        TargetColumn(
            key="email",
            label="Email",
            patterns=["email", "mail", "e-mail", "courriel", "@"],
        ),
        TargetColumn(
            key="website",
            label="Site web",
            patterns=["site", "url", "website", "web", "www", "http"],
        ),
        TargetColumn(
            key="description",
            label="Description",
            patterns=["description", "desc", "activite", "services", "presentation", "commentaire"],
        ),
        TargetColumn(
            key="postal_code",
            label="Code postal",
            patterns=["postal", "cp", "code_postal", "zip", "code"],
        ),
        TargetColumn(
            key="city",
            label="Ville",
            patterns=["ville", "city", "commune", "localite", "agglomeration"],
        ),
        TargetColumn(
            key="postal_city",
            label="Code postal + Ville",
            patterns=["postal_city", "cp_ville", "code_ville", "ville_complete"],
            transform=SPLIT_POSTAL_CITY,
        ),
    ],
    ImportTarget.PRODUCTS: [
        TargetColumn(
            key="name",
            label="Nom",
            required=True,
            patterns=["nom", "name", "produit", "product", "designation", "libelle"],
        ),
        TargetColumn(key="sku", label="SKU", patterns=["sku", "ref", "reference", "ean"]),
        TargetColumn(key="price", label="Prix", patterns=["prix", "price", "tarif"]),
        TargetColumn(
            key="stock_quantity",
            label="Stock",
            patterns=["stock", "quantite", "quantity", "qte", "qty"],
        ),
        TargetColumn(
            key="category",
            label="Catégorie",
            patterns=["categorie", "category", "famille", "rayon"],
        ),
        TargetColumn(
            key="description",
            label="Description",
            patterns=["description", "desc", "details"],
        ),
    ],
}


# Parsing


def decode_content(content: bytes) -> Tuple[str, str]:
    """Decode as UTF-8 (BOM stripped), falling back to latin-1."""
    try:
        return content.decode("utf-8-sig"), "utf-8"
    except UnicodeDecodeError:
        return content.decode("latin-1"), "latin-1"


def detect_separator(text: str) -> str:
    """Separator that splits the header line into the most columns.

    Ties go to tab, then semicolon, then comma; comma when nothing splits.
    """
    first_line = text.split("\n", 1)[0]
    best, best_columns = ",", 1
    for separator in SEPARATORS:
        columns = len(first_line.split(separator))
        if columns > best_columns:
            best, best_columns = separator, columns
    return best


def parse_csv(content: bytes, max_rows: Optional[int] = None) -> OperationResult:
    """Parse an uploaded CSV file.

    Returns:
        OperationResult with a ParsedCSV; PERMANENT_ERROR for empty,
        unreadable or oversized files.
    """
    if not content or not content.strip():
        return OperationResult.permanent_error("Le fichier est vide", error_code="EMPTY_FILE")

    text, encoding = decode_content(content)
    if not text.strip():
        return OperationResult.permanent_error("Le fichier est vide", error_code="EMPTY_FILE")

    separator = detect_separator(text)
    try:
        header = pd.read_csv(io.StringIO(text), sep=separator, dtype=str, nrows=0)
        # Fields are taken by position: extra trailing fields are dropped and
        # missing ones read as empty strings.
        frame = pd.read_csv(
            io.StringIO(text),
            sep=separator,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            index_col=False,
            usecols=list(range(len(header.columns))),
        ).fillna("")
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        logger.warning("csv_parse_failed", error=str(e), separator=separator)
        return OperationResult.permanent_error(
            f"Fichier CSV illisible: {e}", error_code="INVALID_CSV"
        )

    frame.columns = [str(column).strip().strip('"') for column in frame.columns]
    frame = frame.apply(lambda column: column.str.strip())

    if max_rows is not None and len(frame) > max_rows:
        return OperationResult.permanent_error(
            f"Trop de lignes ({len(frame)}), maximum {max_rows}", error_code="TOO_MANY_ROWS"
        )

    rows = frame.to_dict(orient="records")
    parsed = ParsedCSV(
        headers=list(frame.columns),
        rows=rows,
        separator=separator,
        encoding=encoding,
        preview=rows[:PREVIEW_ROWS],
    )
    logger.info(
        "csv_parsed", rows=len(rows), columns=len(parsed.headers), separator=separator, encoding=encoding
    )
    return OperationResult.success(data=parsed)


# Column mapping


def levenshtein_distance(first: str, second: str) -> int:
    previous = list(range(len(second) + 1))
    for i, first_char in enumerate(first, start=1):
        current = [i]
        for j, second_char in enumerate(second, start=1):
            cost = 0 if first_char == second_char else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def similarity(first: str, second: str) -> float:
    """1.0 for identical strings, down to 0.0, relative to the longer one."""
    longer, shorter = (first, second) if len(first) >= len(second) else (second, first)
    if not longer:
        return 1.0
    return (len(longer) - levenshtein_distance(longer, shorter)) / len(longer)


def _matches_pattern(header: str, patterns: Iterable[str]) -> bool:
    return any(header == p or p in header or header in p for p in patterns)


def _is_similar(header: str, patterns: Iterable[str], threshold: float) -> bool:
    return any(similarity(header, p) > threshold for p in patterns)


def detect_header(
    column: TargetColumn,
    headers: List[str],
    preview: List[Dict[str, str]],
    threshold: float = 0.7,
) -> Optional[str]:
    """Header most likely to carry ``column``, or None.

    Tries, in order: equal/contains/contained pattern match, fuzzy
    similarity above ``threshold``, and for ``postal_city`` a first preview
    value shaped like ``75001 Paris``.
    """
    normalized = [(header, header.lower().strip()) for header in headers]
    normalized = [(header, lowered) for header, lowered in normalized if lowered]

    for header, lowered in normalized:
        if _matches_pattern(lowered, column.patterns):
            return header

    for header, lowered in normalized:
        if _is_similar(lowered, column.patterns, threshold):
            return header

    if column.key == "postal_city" and preview:
        for header in headers:
            sample = str(preview[0].get(header) or "").strip()
            if sample and POSTAL_CITY_VALUE.match(sample):
                return header

    return None


def auto_map_columns(
    headers: List[str],
    preview: List[Dict[str, str]],
    target: ImportTarget = ImportTarget.REPAIRERS,
    threshold: float = 0.7,
) -> List[ColumnMapping]:
    """Propose one mapping per target column."""
    mappings = []
    for column in TARGET_COLUMNS[target]:
        header = detect_header(column, headers, preview, threshold)
        mappings.append(
            ColumnMapping(
                csv_column=header or "",
                db_column=column.key,
                required=column.required,
                detected=header is not None,
                transform=column.transform,
            )
        )
    return mappings


def missing_required_columns(mappings: List[ColumnMapping]) -> List[str]:
    return [m.db_column for m in mappings if m.required and not m.csv_column]


def validate_mappings(mappings: List[ColumnMapping]) -> OperationResult:
    """Success when every required column is mapped to a header."""
    missing = missing_required_columns(mappings)
    if missing:
        return OperationResult.error(
            OperationStatus.PERMANENT_ERROR,
            f"Colonnes obligatoires non mappées: {', '.join(missing)}",
            error_code="MISSING_REQUIRED_COLUMNS",
            data=missing,
        )
    return OperationResult.success(data=mappings)


# Transformation


def split_postal_city(value: str) -> Optional[Tuple[str, str]]:
    """Split ``"75001 Paris"`` into ``("75001", "Paris")``."""
    match = POSTAL_CITY_PARTS.match((value or "").strip())
    if not match:
        return None
    return match.group(1), match.group(2).strip()


def apply_mappings(rows: List[Dict[str, Any]], mappings: List[ColumnMapping]) -> List[Dict[str, Any]]:
    """Build one record per row from the mapped, non-empty cells."""
    records = []
    for row in rows:
        record: Dict[str, Any] = {}
        for mapping in mappings:
            if not mapping.csv_column:
                continue
            value = str(row.get(mapping.csv_column) or "").strip()
            if not value:
                continue
            if mapping.transform == SPLIT_POSTAL_CITY:
                parts = split_postal_city(value)
                if parts:
                    record["postal_code"], record["city"] = parts
                    continue
            record[mapping.db_column] = value
        records.append(record)
    return records


def _to_list(value: Any, default: List[str]) -> List[str]:
    if isinstance(value, list):
        items = [str(item).strip() for item in value if str(item).strip()]
    elif isinstance(value, str):
        items = [item.strip() for item in value.split(",") if item.strip()]
    else:
        items = []
    return items or list(default)


def _to_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(str(value).replace(",", ".").replace(" ", ""))
    except ValueError:
        return None


def clean_text(value: Any, limit: int = TEXT_LIMIT) -> Optional[str]:
    text = str(value).strip() if value is not None else ""
    return text[:limit] or None


def clean_phone(value: Any) -> Optional[str]:
    """French number with separators removed, or None."""
    digits = re.sub(r"[^\d+]", "", str(value or ""))
    return digits if PHONE_PATTERN.match(digits) else None


def clean_email(value: Any) -> Optional[str]:
    text = str(value or "").strip()
    if not text:
        return None
    try:
        validated = validate_email(text, check_deliverability=False)
    except EmailNotValidError:
        return None
    return validated.normalized.lower()


def clean_website(value: Any) -> Optional[str]:
    """Keep absolute URLs; prefix bare domains with ``https://``."""
    text = str(value or "").strip()
    if not text:
        return None
    parsed = urlparse(text)
    if parsed.scheme and parsed.netloc:
        return text
    if "." in text and " " not in text:
        return f"https://{text}"
    return None


def clean_postal_code(value: Any) -> Optional[str]:
    match = POSTAL_CODE_PATTERN.search(str(value or ""))
    return match.group(0) if match else None


def generate_unique_id(name: str) -> str:
    """``CSV_<name>_<epoch ms>_<random>``, e.g. ``CSV_atelierrep_1735689600000_3f2a``."""
    compact = re.sub(r"[^a-z0-9]", "", name.lower())[:10]
    return f"CSV_{compact}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:4]}"


def data_quality_score(record: Dict[str, Any]) -> int:
    """Completeness score out of 100."""
    score = 0
    if len(record.get("name") or "") > 3:
        score += 20
    if len(record.get("address") or "") > 10:
        score += 20
    if record.get("phone"):
        score += 15
    if record.get("email"):
        score += 15
    if record.get("website"):
        score += 10
    if record.get("lat") is not None and record.get("lng") is not None:
        score += 15
    if len(record.get("description") or "") > 20:
        score += 5
    return min(100, score)


def normalize_repairer(record: Dict[str, Any], category_id: Optional[str] = None) -> Dict[str, Any]:
    """Clean each column of a mapped repairer row and fill the defaults.

    Invalid phone numbers, emails, websites and postal codes become empty
    rather than failing the row. The quality score is computed on the
    cleaned values, before placeholders are filled in.
    """
    name = clean_text(record.get("name")) or ""
    price_range = record.get("price_range")
    cleaned = {
        "name": name,
        "address": clean_text(record.get("address")),
        "city": clean_text(record.get("city")),
        "postal_code": clean_postal_code(record.get("postal_code")),
        "phone": clean_phone(record.get("phone")),
        "email": clean_email(record.get("email")),
        "website": clean_website(record.get("website")),
        "description": clean_text(record.get("description"), DESCRIPTION_LIMIT),
        "lat": _to_float(record.get("lat")),
        "lng": _to_float(record.get("lng")),
    }
    score = data_quality_score(cleaned)

    postal_code = cleaned["postal_code"] or DEFAULT_POSTAL_CODE
    normalized = {
        **cleaned,
        "address": cleaned["address"] or DEFAULT_ADDRESS,
        "postal_code": postal_code,
        "services": _to_list(record.get("services"), DEFAULT_SERVICES),
        "specialties": _to_list(record.get("specialties"), DEFAULT_SPECIALTIES),
        "price_range": price_range if price_range in PRICE_RANGES else "medium",
        "department": postal_code[:2],
        "region": "France",
        "source": "csv_import",
        "unique_id": generate_unique_id(name),
        "data_quality_score": score,
    }
    if category_id:
        normalized["business_category_id"] = category_id
    return normalized


def normalize_product(
    record: Dict[str, Any], user: User, low_stock_threshold: int
) -> Dict[str, Any]:
    name = record.get("name") or ""
    quantity = _to_float(record.get("stock_quantity"))
    quantity = max(int(quantity), 0) if quantity is not None else 0
    return {
        "repairer_id": user.id,
        "name": name,
        "slug": slugify(name),
        "sku": record.get("sku") or None,
        "price": _to_float(record.get("price")) or 0.0,
        "stock_quantity": quantity,
        "stock_status": stock_status_for(quantity, low_stock_threshold).value,
        "category": record.get("category") or None,
        "description": record.get("description") or None,
        "status": "draft",
    }


# Remote functions


def _count(payload: Dict[str, Any], key: str) -> int:
    try:
        return int(payload.get(key) or 0)
    except (TypeError, ValueError):
        return 0


def import_with_enrichment(
    backend: BackendClient,
    settings: Settings,
    records: List[Dict[str, Any]],
    category_id: Optional[str] = None,
    enable_geocoding: bool = False,
) -> OperationResult:
    """Hand records to the AI import function, which enriches and stores them.

    The function inserts the rows itself and answers with counts
    (``imported``, ``processed``, ``geocoded``, ``aiEnhanced``), so callers
    must not insert these records again.

    Returns:
        OperationResult with ``{"imported", "processed", "geocoded",
        "ai_enhanced"}``
    """
    result = backend.invoke_function(
        settings.imports.IMPORT_ENRICH_FUNCTION,
        {
            "providedData": records,
            "categoryId": category_id,
            "enableAI": True,
            "enableGeocoding": enable_geocoding,
        },
    )
    if not result.is_success:
        return result

    payload = result.data if isinstance(result.data, dict) else {}
    if not payload.get("success"):
        return OperationResult.permanent_error(
            payload.get("error") or "Import enrichi refusé", error_code="ENRICHED_IMPORT_FAILED"
        )
    return OperationResult.success(
        data={
            "imported": _count(payload, "imported"),
            "processed": _count(payload, "processed") or len(records),
            "geocoded": _count(payload, "geocoded"),
            "ai_enhanced": _count(payload, "aiEnhanced"),
        }
    )


def geocode_imported(backend: BackendClient, settings: Settings, limit: int) -> OperationResult:
    """Run the batch geocoder over up to ``limit`` stored repairers lacking coordinates.

    Returns:
        OperationResult with the number of repairers geocoded
    """
    result = backend.invoke_function(settings.imports.IMPORT_GEOCODE_FUNCTION, {"limit": limit})
    if not result.is_success:
        return result
    payload = result.data if isinstance(result.data, dict) else {}
    return OperationResult.success(
        data=_count(payload, "geocoded"), message=payload.get("message") or "ok"
    )


# Import


def _insert_rows(
    backend: BackendClient,
    table: str,
    candidates: List[Tuple[int, Dict[str, Any]]],
    summary: ImportResult,
    log,
) -> None:
    for number, record in candidates:
        inserted = backend.insert(table, record)
        if inserted.is_success:
            summary.imported += 1
        else:
            summary.failed += 1
            summary.errors.append(
                RowError(row=number, name=record.get("name"), message=inserted.message)
            )
            log.warning("import_row_failed", row=number, error=inserted.message)


def run_import(
    backend: BackendClient, user: User, settings: Settings, request: ImportRequest
) -> OperationResult:
    """Map and normalise the rows, then store them.

    Repairers imported with AI enabled are handed to the import function,
    which enriches, geocodes and inserts them in one call. If that call
    fails the rows are inserted here without enrichment. Otherwise each row
    is inserted here and, with geocoding enabled, the batch geocoder runs
    once afterwards. A row that fails to insert is counted and reported
    without stopping the others.

    Returns:
        OperationResult with an ImportResult
    """
    log = logger.bind(operation="run_import", target=request.target.value, rows=len(request.rows))

    validation = validate_mappings(request.mappings)
    if not validation.is_success:
        return validation
    if len(request.rows) > settings.imports.IMPORT_MAX_ROWS:
        return OperationResult.permanent_error(
            f"Trop de lignes ({len(request.rows)}), maximum {settings.imports.IMPORT_MAX_ROWS}",
            error_code="TOO_MANY_ROWS",
        )

    summary = ImportResult(target=request.target, processed=len(request.rows))
    candidates: List[Tuple[int, Dict[str, Any]]] = []
    for number, record in enumerate(apply_mappings(request.rows, request.mappings), start=1):
        name = (record.get("name") or "").strip()
        if len(name) < 2:
            summary.failed += 1
            summary.errors.append(RowError(row=number, message="Nom manquant ou invalide"))
            continue
        if request.target == ImportTarget.PRODUCTS:
            record = normalize_product(record, user, settings.storefront.LOW_STOCK_THRESHOLD)
        else:
            record = normalize_repairer(record, request.category_id)
        candidates.append((number, record))

    repairers = request.target == ImportTarget.REPAIRERS and bool(candidates)
    stored_remotely = False
    if repairers and request.enable_ai:
        remote = import_with_enrichment(
            backend,
            settings,
            [record for _, record in candidates],
            request.category_id,
            enable_geocoding=request.enable_geocoding,
        )
        if remote.is_success:
            stored_remotely = True
            summary.imported = remote.data["imported"]
            summary.failed += max(len(candidates) - summary.imported, 0)
            summary.geocoded = remote.data["geocoded"]
            summary.ai_enhanced = remote.data["ai_enhanced"]
        else:
            log.warning("import_enrichment_skipped", error=remote.message)

    if not stored_remotely:
        _insert_rows(backend, TARGET_TABLES[request.target], candidates, summary, log)
        if repairers and request.enable_geocoding and summary.imported:
            geocoded = geocode_imported(backend, settings, summary.imported)
            if geocoded.is_success:
                summary.geocoded = geocoded.data
            else:
                log.warning("geocoding_skipped", error=geocoded.message)

    audit_action(
        backend,
        user,
        "import",
        request.target.value,
        details={
            "processed": summary.processed,
            "imported": summary.imported,
            "failed": summary.failed,
        },
        table=settings.audit.AUDIT_TABLE,
    )
    log.info("import_completed", imported=summary.imported, failed=summary.failed)
    return OperationResult.success(
        data=summary, message=f"{summary.imported} ligne(s) importée(s)"
    )
