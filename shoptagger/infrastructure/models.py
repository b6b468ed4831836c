"""SQLAlchemy models for database tables.

Provides the ORM model for the product tag audit log.
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, Column, DateTime, Index, String, Text

from shoptagger.domain.models import AuditEntry, AuditStatus, TagAction
from shoptagger.infrastructure.database import Base


class ProductTagAuditModel(Base):
    """Audit row for one tagging attempt on one product.

    Rows are append-only; concurrent background jobs insert independently.
    """

    __tablename__ = "product_tag_audits"
    __table_args__ = (
        Index("ix_product_tag_audits_product_id_created_at", "product_id", "created_at"),
    )

    id = Column(BigInteger, primary_key=True, autoincrement=True)
    product_id = Column(String(255), nullable=False)
    action = Column(String(20), nullable=False)
    tag = Column(String(255), nullable=False)
    status = Column(String(20), nullable=False)
    error_message = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    @classmethod
    def from_entry(cls, entry: AuditEntry) -> "ProductTagAuditModel":
        """Create from a domain audit entry."""
        return cls(
            product_id=entry.product_id,
            action=entry.action.value,
            tag=entry.tag,
            status=entry.status.value,
            error_message=entry.error_message,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )

    def to_entry(self) -> AuditEntry:
        """Convert to a domain audit entry."""
        return AuditEntry(
            id=self.id,
            product_id=self.product_id,
            action=TagAction(self.action),
            tag=self.tag,
            status=AuditStatus(self.status),
            error_message=self.error_message,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
