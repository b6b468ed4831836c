"""Synthetic catalog data.

Generates test products for bulk creation.
"""

from shoptagger.catalog.generator import (
    COLORS,
    MATERIALS,
    PRODUCT_TYPES,
    GeneratorConfig,
    ProductGenerator,
)

__all__ = [
    "COLORS",
    "MATERIALS",
    "PRODUCT_TYPES",
    "GeneratorConfig",
    "ProductGenerator",
]
