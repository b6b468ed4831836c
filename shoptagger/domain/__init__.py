"""Domain layer.

Catalog values, tagging outcomes, audit records and domain errors.
"""

from shoptagger.domain.exceptions import (
    ConfigurationError,
    DomainError,
    InvalidGenerateCountError,
    InvalidTagError,
)
from shoptagger.domain.models import (
    AuditEntry,
    AuditStatus,
    Collection,
    CollectionsResult,
    FilterSet,
    MutationResult,
    ProductDraft,
    ProductPage,
    ProductRef,
    SearchResult,
    TagAction,
    TagOutcome,
    TagsResult,
    ThrottleStatus,
    has_tag,
    normalize_tag,
)

__all__ = [
    # Exceptions
    "ConfigurationError",
    "DomainError",
    "InvalidGenerateCountError",
    "InvalidTagError",
    # Models
    "AuditEntry",
    "AuditStatus",
    "Collection",
    "CollectionsResult",
    "FilterSet",
    "MutationResult",
    "ProductDraft",
    "ProductPage",
    "ProductRef",
    "SearchResult",
    "TagAction",
    "TagOutcome",
    "TagsResult",
    "ThrottleStatus",
    "has_tag",
    "normalize_tag",
]
