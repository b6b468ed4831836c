"""Tests for domain models."""

import pytest

from shoptagger.domain.exceptions import InvalidTagError
from shoptagger.domain.models import (
    AuditEntry,
    AuditStatus,
    FilterSet,
    ProductDraft,
    ProductRef,
    TagAction,
    TagOutcome,
    ThrottleStatus,
    has_tag,
    normalize_tag,
)


class TestFilterSet:
    """Tests for FilterSet query composition."""

    def test_empty_filters_match_everything(self) -> None:
        """No filters produces the match-all query."""
        filters = FilterSet()
        assert filters.is_empty
        assert filters.to_query() == "*"

    def test_keyword_and_product_type(self) -> None:
        """Clauses are joined with AND in a fixed order."""
        filters = FilterSet(keyword="shirt", product_type="Apparel")
        assert filters.to_query() == "title:*shirt* AND product_type:'Apparel'"

    def test_all_filters(self) -> None:
        """Every filter contributes one clause, vendor last."""
        filters = FilterSet(
            keyword="mug",
            product_type="Kitchen",
            collection_id="123",
            vendor="Acme",
        )
        assert filters.to_query() == (
            "title:*mug* AND product_type:'Kitchen' AND collection_id:123 AND vendor:'Acme'"
        )

    def test_collection_only(self) -> None:
        """Collection filter is not quoted."""
        assert FilterSet(collection_id="42").to_query() == "collection_id:42"

    def test_blank_values_are_ignored(self) -> None:
        """Empty strings do not produce clauses."""
        filters = FilterSet(keyword="", product_type="")
        assert filters.is_empty
        assert filters.to_query() == "*"


class TestTags:
    """Tests for tag normalization and membership."""

    def test_normalize_strips_whitespace(self) -> None:
        assert normalize_tag("  Summer Sale  ") == "Summer Sale"

    def test_normalize_rejects_blank(self) -> None:
        with pytest.raises(InvalidTagError):
            normalize_tag("   ")

    def test_normalize_rejects_too_long(self) -> None:
        with pytest.raises(InvalidTagError) as exc_info:
            normalize_tag("x" * 256)
        assert exc_info.value.details["reason"].startswith("tag must be at most")

    def test_normalize_accepts_max_length(self) -> None:
        assert normalize_tag("x" * 255) == "x" * 255

    def test_has_tag_ignores_case(self) -> None:
        assert has_tag(["Summer", "Sale"], "summer")
        assert has_tag(["Summer", "Sale"], "SALE")
        assert not has_tag(["Summer", "Sale"], "Winter")

    def test_has_tag_empty(self) -> None:
        assert not has_tag([], "anything")


class TestThrottleStatus:
    """Tests for reading throttle status from response extensions."""

    def test_from_extensions(self) -> None:
        throttle = ThrottleStatus.from_extensions(
            {
                "cost": {
                    "throttleStatus": {
                        "maximumAvailable": 1000.0,
                        "currentlyAvailable": 40,
                        "restoreRate": 20.0,
                    }
                }
            }
        )
        assert throttle == ThrottleStatus(currently_available=40.0, restore_rate=20.0)

    def test_missing_extensions(self) -> None:
        assert ThrottleStatus.from_extensions(None) is None
        assert ThrottleStatus.from_extensions({}) is None
        assert ThrottleStatus.from_extensions({"cost": {}}) is None

    def test_missing_restore_rate_reads_as_zero(self) -> None:
        throttle = ThrottleStatus.from_extensions(
            {"cost": {"throttleStatus": {"currentlyAvailable": 10}}}
        )
        assert throttle is not None
        assert throttle.restore_rate == 0.0


class TestProductModels:
    """Tests for product value types."""

    def test_product_ref_from_node(self) -> None:
        product = ProductRef.from_node(
            {"id": "gid://shopify/Product/1", "title": "Mug", "tags": ["b", "a"]}
        )
        assert product.id == "gid://shopify/Product/1"
        assert product.tags == ["b", "a"]

    def test_product_ref_from_node_without_tags(self) -> None:
        product = ProductRef.from_node({"id": "gid://shopify/Product/1", "tags": None})
        assert product.title == ""
        assert product.tags == []

    def test_draft_input_excludes_price(self) -> None:
        draft = ProductDraft(
            title="Red Cotton T-Shirt #1",
            description_html="High-quality",
            product_type="Test Product",
            vendor="Test Vendor",
            price="19.99",
            tags=["T-Shirt", "Red", "Cotton", "Test Data"],
        )
        product_input = draft.to_input()
        assert product_input == {
            "title": "Red Cotton T-Shirt #1",
            "descriptionHtml": "High-quality",
            "productType": "Test Product",
            "vendor": "Test Vendor",
            "tags": ["T-Shirt", "Red", "Cotton", "Test Data"],
        }


class TestAuditEntry:
    """Tests for audit entry construction."""

    def test_from_added_outcome(self) -> None:
        outcome = TagOutcome(success=True, action=TagAction.ADDED, message="Tag added successfully")
        entry = AuditEntry.from_outcome("gid://shopify/Product/1", "sale", outcome)
        assert entry.action == TagAction.ADDED
        assert entry.status == AuditStatus.SUCCESS
        assert entry.error_message is None

    def test_from_failed_outcome(self) -> None:
        outcome = TagOutcome(success=False, action=TagAction.FAILED, message="boom")
        entry = AuditEntry.from_outcome("gid://shopify/Product/1", "sale", outcome)
        assert entry.status == AuditStatus.ERROR
        assert entry.error_message == "boom"

    def test_failure(self) -> None:
        entry = AuditEntry.failure("gid://shopify/Product/1", "sale", "timed out")
        data = entry.to_dict()
        assert data["action"] == "failed"
        assert data["status"] == "error"
        assert data["error_message"] == "timed out"
