"""Synthetic product generator.

Builds test products from fixed vocabularies of product types, colors and
materials. Pass a seed for reproducible output.
"""

import random
from collections.abc import Iterator
from dataclasses import dataclass

from shoptagger.domain.models import TEST_DATA_TAG, ProductDraft


# ============================================================================
# Constants
# ============================================================================

PRODUCT_TYPES = [
    "T-Shirt",
    "Hoodie",
    "Jacket",
    "Pants",
    "Shoes",
    "Hat",
    "Bag",
    "Accessory",
]

COLORS = [
    "Red",
    "Blue",
    "Green",
    "Black",
    "White",
    "Yellow",
    "Purple",
    "Orange",
    "Pink",
    "Gray",
]

MATERIALS = [
    "Cotton",
    "Polyester",
    "Wool",
    "Leather",
    "Denim",
    "Silk",
]

# Price range in cents ($19.99 - $99.99)
PRICE_RANGE = (1999, 9999)

DEFAULT_PRODUCT_TYPE = "Test Product"
DEFAULT_VENDOR = "Test Vendor"


# ============================================================================
# Generator Configuration
# ============================================================================


@dataclass
class GeneratorConfig:
    """Configuration for product generation.

    Attributes:
        seed: Random seed; None draws from system entropy.
        product_type: Product type stored on every product.
        vendor: Vendor stored on every product.
    """

    seed: int | None = None
    product_type: str = DEFAULT_PRODUCT_TYPE
    vendor: str = DEFAULT_VENDOR


# ============================================================================
# Product Generator
# ============================================================================


class ProductGenerator:
    """Generates synthetic product drafts.

    The random type/color/material only shape the title, description and
    tags; ``product_type`` and ``vendor`` come from the config.

    Example usage:
        generator = ProductGenerator(GeneratorConfig(seed=7))
        for draft in generator.generate(25):
            print(draft.title)
    """

    def __init__(self, config: GeneratorConfig | None = None) -> None:
        """Initialize generator with configuration.

        Args:
            config: Generator configuration.
        """
        self.config = config or GeneratorConfig()
        self.rng = random.Random(self.config.seed)

    def generate_one(self, number: int) -> ProductDraft:
        """Generate the product with the given 1-based sequence number.

        Args:
            number: Position in the batch, used in the title.

        Returns:
            ProductDraft.
        """
        product_type = self.rng.choice(PRODUCT_TYPES)
        color = self.rng.choice(COLORS)
        material = self.rng.choice(MATERIALS)
        price_cents = self.rng.randint(*PRICE_RANGE)

        return ProductDraft(
            title=f"{color} {material} {product_type} #{number}",
            description_html=(
                f"High-quality {material} {product_type} in {color}. "
                "Perfect for everyday wear."
            ),
            product_type=self.config.product_type,
            vendor=self.config.vendor,
            price=f"{price_cents / 100:.2f}",
            tags=[product_type, color, material, TEST_DATA_TAG],
        )

    def generate(self, count: int) -> Iterator[ProductDraft]:
        """Generate ``count`` products numbered from 1.

        Args:
            count: Number of products.

        Yields:
            ProductDraft for each product.
        """
        for number in range(1, count + 1):
            yield self.generate_one(number)
