"""Shared fixtures for API tests."""

from collections.abc import Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from shoptagger.api import generator, tagger
from shoptagger.application.generator_service import GeneratorService
from shoptagger.application.tagging_service import TaggingService
from shoptagger.infrastructure.audit_repository import InMemoryAuditLogRepository
from shoptagger.infrastructure.config import settings
from shoptagger.main import app


@pytest.fixture
def client() -> TestClient:
    """Create test client without authentication."""
    return TestClient(app)


@pytest.fixture
def auth_client() -> TestClient:
    """Create test client with valid API key authentication."""
    return TestClient(
        app,
        headers={"Authorization": f"Bearer {settings.shoptagger_api_key}"},
    )


@pytest.fixture
def tagging_service() -> Iterator[MagicMock]:
    """Replace the tagging service with a mock."""
    service = MagicMock(spec=TaggingService)
    service.collections = AsyncMock()
    service.preview = AsyncMock()
    service.apply_tag = AsyncMock()
    service.view_products = AsyncMock()

    app.dependency_overrides[tagger.get_service] = lambda: service
    yield service
    app.dependency_overrides.pop(tagger.get_service, None)


@pytest.fixture
def generator_service() -> Iterator[MagicMock]:
    """Replace the generator service with a mock."""
    service = MagicMock(spec=GeneratorService)
    service.generate = AsyncMock()
    service.delete_matching = AsyncMock()

    app.dependency_overrides[generator.get_service] = lambda: service
    yield service
    app.dependency_overrides.pop(generator.get_service, None)


@pytest.fixture
def audit_log() -> Iterator[InMemoryAuditLogRepository]:
    """Replace the audit log with an in-memory one."""
    repository = InMemoryAuditLogRepository()

    app.dependency_overrides[tagger.get_audit_log] = lambda: repository
    yield repository
    app.dependency_overrides.pop(tagger.get_audit_log, None)
