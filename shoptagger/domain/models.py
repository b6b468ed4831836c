"""Domain models for catalog administration.

Plain dataclasses describing filters, product references, tagging outcomes
and audit records, plus the result types returned by catalog operations.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from shoptagger.domain.exceptions import InvalidTagError

TAG_MAX_LENGTH = 255

# Tag applied to every generated product
TEST_DATA_TAG = "Test Data"


# ============================================================================
# Enums
# ============================================================================


class TagAction(str, Enum):
    """What add-tag did to a product."""

    ADDED = "added"
    SKIPPED = "skipped"
    FAILED = "failed"


class AuditStatus(str, Enum):
    """Overall status of an audited tagging attempt."""

    SUCCESS = "success"
    ERROR = "error"


# ============================================================================
# Catalog Values
# ============================================================================


@dataclass(frozen=True)
class FilterSet:
    """Product search filters, combined with AND.

    An empty filter set matches every product.

    Attributes:
        keyword: Substring matched against product titles.
        product_type: Exact product type.
        collection_id: Numeric or GID collection identifier.
        vendor: Exact vendor name.
    """

    keyword: str | None = None
    product_type: str | None = None
    collection_id: str | None = None
    vendor: str | None = None

    @property
    def is_empty(self) -> bool:
        """Check if no filter field is set."""
        return not any((self.keyword, self.product_type, self.collection_id, self.vendor))

    def to_query(self) -> str:
        """Build the Shopify search expression for these filters.

        Values are inserted verbatim; quotes and search operators in filter
        values are not escaped.

        Returns:
            Search expression, or ``*`` when no filter is set.
        """
        conditions: list[str] = []
        if self.keyword:
            conditions.append(f"title:*{self.keyword}*")
        if self.product_type:
            conditions.append(f"product_type:'{self.product_type}'")
        if self.collection_id:
            conditions.append(f"collection_id:{self.collection_id}")
        if self.vendor:
            conditions.append(f"vendor:'{self.vendor}'")
        return " AND ".join(conditions) or "*"


@dataclass
class ProductRef:
    """A product as returned by search: identity, title and tags."""

    id: str
    title: str
    tags: list[str] = field(default_factory=list)

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> "ProductRef":
        """Create from a GraphQL product node."""
        return cls(
            id=node["id"],
            title=node.get("title", ""),
            tags=list(node.get("tags") or []),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"id": self.id, "title": self.title, "tags": list(self.tags)}


@dataclass(frozen=True)
class Collection:
    """A collection, as listed for the filter selector."""

    id: str
    title: str
    handle: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary."""
        return {"id": self.id, "title": self.title, "handle": self.handle}


@dataclass
class ProductPage:
    """One page of search results.

    Attributes:
        products: Products in server order.
        next_cursor: End cursor of this page.
        has_more: Whether another page follows.
    """

    products: list[ProductRef]
    next_cursor: str | None = None
    has_more: bool = False


@dataclass(frozen=True)
class ThrottleStatus:
    """Remaining query cost budget reported by the store."""

    currently_available: float
    restore_rate: float

    @classmethod
    def from_extensions(cls, extensions: dict[str, Any] | None) -> "ThrottleStatus | None":
        """Read ``cost.throttleStatus`` from a response's extensions."""
        if not extensions:
            return None
        throttle = (extensions.get("cost") or {}).get("throttleStatus")
        if not throttle or throttle.get("currentlyAvailable") is None:
            return None
        return cls(
            currently_available=float(throttle["currentlyAvailable"]),
            restore_rate=float(throttle.get("restoreRate") or 0),
        )


@dataclass
class ProductDraft:
    """A synthetic product ready to be created."""

    title: str
    description_html: str
    product_type: str
    vendor: str
    price: str
    tags: list[str]

    def to_input(self) -> dict[str, Any]:
        """Build the ``ProductInput`` payload for ``productCreate``."""
        return {
            "title": self.title,
            "descriptionHtml": self.description_html,
            "productType": self.product_type,
            "vendor": self.vendor,
            "tags": list(self.tags),
        }


def normalize_tag(tag: str) -> str:
    """Strip surrounding whitespace and validate a tag.

    Args:
        tag: Raw tag from the operator.

    Returns:
        The stripped tag.

    Raises:
        InvalidTagError: If the tag is blank or longer than 255 characters.
    """
    stripped = tag.strip()
    if not stripped:
        raise InvalidTagError(tag, "tag must not be blank")
    if len(stripped) > TAG_MAX_LENGTH:
        raise InvalidTagError(tag, f"tag must be at most {TAG_MAX_LENGTH} characters")
    return stripped


def has_tag(tags: list[str], tag: str) -> bool:
    """Check tag membership ignoring case."""
    wanted = tag.casefold()
    return any(existing.casefold() == wanted for existing in tags)


# ============================================================================
# Operation Results
# ============================================================================


@dataclass
class SearchResult:
    """Result of fetching one page of products."""

    page: ProductPage | None = None
    success: bool = True
    error: str | None = None
    error_code: str | None = None


@dataclass
class CollectionsResult:
    """Result of listing collections."""

    collections: list[Collection] = field(default_factory=list)
    success: bool = True
    error: str | None = None
    error_code: str | None = None


@dataclass
class TagsResult:
    """Result of fetching a single product's tags."""

    tags: list[str] = field(default_factory=list)
    found: bool = True
    success: bool = True
    error: str | None = None
    error_code: str | None = None


@dataclass
class MutationResult:
    """Result of a create or delete mutation."""

    product_id: str | None = None
    success: bool = True
    error: str | None = None
    error_code: str | None = None


@dataclass
class TagOutcome:
    """Structured outcome of add-tag; never raised, always returned."""

    success: bool
    action: TagAction
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "success": self.success,
            "action": self.action.value,
            "message": self.message,
        }


# ============================================================================
# Audit
# ============================================================================


@dataclass
class AuditEntry:
    """One audited tagging attempt for one product."""

    product_id: str
    action: TagAction
    tag: str
    status: AuditStatus
    error_message: str | None = None
    id: int | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_outcome(cls, product_id: str, tag: str, outcome: TagOutcome) -> "AuditEntry":
        """Build the audit record for an add-tag outcome."""
        return cls(
            product_id=product_id,
            action=outcome.action,
            tag=tag,
            status=AuditStatus.SUCCESS if outcome.success else AuditStatus.ERROR,
            error_message=None if outcome.success else outcome.message,
        )

    @classmethod
    def failure(cls, product_id: str, tag: str, error_message: str) -> "AuditEntry":
        """Build a terminal failure record."""
        return cls(
            product_id=product_id,
            action=TagAction.FAILED,
            tag=tag,
            status=AuditStatus.ERROR,
            error_message=error_message,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "product_id": self.product_id,
            "action": self.action.value,
            "tag": self.tag,
            "status": self.status.value,
            "error_message": self.error_message,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
