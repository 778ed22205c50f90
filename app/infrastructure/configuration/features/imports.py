"""CSV import feature settings."""

from pydantic import Field

from infrastructure.configuration.base import FeatureSettings


class ImportsFeatureSettings(FeatureSettings):
    """CSV import configuration.

    Environment Variables:
        IMPORT_ENRICH_FUNCTION: Remote function classifying/enriching rows with AI
        IMPORT_GEOCODE_FUNCTION: Remote function geocoding addresses
        IMPORT_SIMILARITY_THRESHOLD: Minimum header similarity for fuzzy mapping
        IMPORT_MAX_ROWS: Maximum number of rows accepted in one import
    """

    IMPORT_ENRICH_FUNCTION: str = Field(
        default="csv-intelligent-import", alias="IMPORT_ENRICH_FUNCTION"
    )
    IMPORT_GEOCODE_FUNCTION: str = Field(
        default="geocode-repairers", alias="IMPORT_GEOCODE_FUNCTION"
    )
    IMPORT_SIMILARITY_THRESHOLD: float = Field(
        default=0.7, alias="IMPORT_SIMILARITY_THRESHOLD"
    )
    IMPORT_MAX_ROWS: int = Field(default=5000, alias="IMPORT_MAX_ROWS")
