"""Audit log repositories.

Append-only storage for product tag audit records, backed either by the
database or by process memory.
"""

from abc import ABC, abstractmethod
from itertools import count

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shoptagger.domain.models import AuditEntry
from shoptagger.infrastructure.config import settings
from shoptagger.infrastructure.database import async_session_factory
from shoptagger.infrastructure.models import ProductTagAuditModel

logger = structlog.get_logger()

DEFAULT_LIST_LIMIT = 100


class AuditLogRepository(ABC):
    """Storage for audit entries."""

    @abstractmethod
    async def record(self, entry: AuditEntry) -> AuditEntry:
        """Append an audit entry.

        Args:
            entry: Entry to store.

        Returns:
            The stored entry with its ID assigned.
        """

    @abstractmethod
    async def list_recent(self, limit: int = DEFAULT_LIST_LIMIT) -> list[AuditEntry]:
        """List the most recent entries, newest first."""

    @abstractmethod
    async def list_for_product(self, product_id: str) -> list[AuditEntry]:
        """List a product's entries, oldest first."""


# ============================================================================
# In-Memory Repository
# ============================================================================


class InMemoryAuditLogRepository(AuditLogRepository):
    """In-memory audit log for tests and local runs without a database."""

    def __init__(self) -> None:
        self._entries: list[AuditEntry] = []
        self._ids = count(1)

    async def record(self, entry: AuditEntry) -> AuditEntry:
        entry.id = next(self._ids)
        self._entries.append(entry)
        return entry

    async def list_recent(self, limit: int = DEFAULT_LIST_LIMIT) -> list[AuditEntry]:
        # Insertion order breaks timestamp ties
        ordered = sorted(
            enumerate(self._entries),
            key=lambda pair: (pair[1].created_at, pair[0]),
            reverse=True,
        )
        return [entry for _, entry in ordered[:limit]]

    async def list_for_product(self, product_id: str) -> list[AuditEntry]:
        return [e for e in self._entries if e.product_id == product_id]


# ============================================================================
# Database Repository
# ============================================================================


class SqlAuditLogRepository(AuditLogRepository):
    """Audit log stored in the ``product_tag_audits`` table.

    Each call opens its own session so concurrent jobs never share one.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize repository.

        Args:
            session_factory: Factory producing async sessions.
        """
        self.session_factory = session_factory

    async def record(self, entry: AuditEntry) -> AuditEntry:
        async with self.session_factory() as session:
            model = ProductTagAuditModel.from_entry(entry)
            session.add(model)
            await session.commit()
            entry.id = model.id
        return entry

    async def list_recent(self, limit: int = DEFAULT_LIST_LIMIT) -> list[AuditEntry]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(ProductTagAuditModel)
                .order_by(ProductTagAuditModel.created_at.desc(), ProductTagAuditModel.id.desc())
                .limit(limit)
            )
            return [row.to_entry() for row in result.scalars().all()]

    async def list_for_product(self, product_id: str) -> list[AuditEntry]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(ProductTagAuditModel)
                .where(ProductTagAuditModel.product_id == product_id)
                .order_by(ProductTagAuditModel.created_at.asc())
            )
            return [row.to_entry() for row in result.scalars().all()]


# ============================================================================
# Repository Singleton
# ============================================================================


_audit_repo: AuditLogRepository | None = None


def get_audit_repository() -> AuditLogRepository:
    """Get the audit repository singleton.

    Uses the database unless ``AUDIT_STORE=memory``.
    """
    global _audit_repo
    if _audit_repo is None:
        if settings.audit_store == "memory":
            _audit_repo = InMemoryAuditLogRepository()
        else:
            _audit_repo = SqlAuditLogRepository(async_session_factory)
        logger.info("Audit store ready", store=settings.audit_store)
    return _audit_repo


def set_audit_repository(repository: AuditLogRepository | None) -> None:
    """Replace the audit repository (for testing)."""
    global _audit_repo
    _audit_repo = repository
