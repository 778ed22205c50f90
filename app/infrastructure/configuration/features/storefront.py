"""Storefront feature settings."""

from pydantic import Field

from infrastructure.configuration.base import FeatureSettings


class StorefrontFeatureSettings(FeatureSettings):
    """E-commerce storefront configuration.

    Environment Variables:
        LOW_STOCK_THRESHOLD: Quantity at or below which a product is low on stock
    """

    LOW_STOCK_THRESHOLD: int = Field(default=5, alias="LOW_STOCK_THRESHOLD")
