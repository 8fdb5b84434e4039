"""
Pytest configuration and fixtures.

Provides a small sample architecture, deterministic id/clock collaborators
and isolation for the process-wide price cache and settings.
"""

from datetime import datetime, timezone

import pytest

from arch_engine.config import get_settings
from arch_engine.ids import SequentialIdGenerator
from arch_engine.model import ArchitectureElement, ArchitectureRelationship
from arch_engine.pricing import clear_price_cache


FIXED_NOW = datetime(2025, 1, 15, 9, 30, tzinfo=timezone.utc)


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def reset_shared_state():
    """Clear the price cache and cached settings around every test."""
    clear_price_cache()
    get_settings.cache_clear()
    yield
    clear_price_cache()
    get_settings.cache_clear()


# =============================================================================
# Collaborators
# =============================================================================


@pytest.fixture
def id_generator():
    return SequentialIdGenerator()


@pytest.fixture
def fixed_now():
    return FIXED_NOW


# =============================================================================
# Builders
# =============================================================================


@pytest.fixture
def make_element():
    """Factory for ArchitectureElement with sensible defaults."""

    def _make(element_id, layer="APPLICATION", name=None, type="service", **metadata):
        tags = metadata.pop("tags", set())
        description = metadata.pop("description", None)
        return ArchitectureElement(
            id=element_id,
            layer=layer,
            name=name or element_id.replace("-", " ").title(),
            type=type,
            description=description,
            tags=tags,
            metadata=metadata,
        )

    return _make


@pytest.fixture
def make_relationship():
    """Factory for ArchitectureRelationship; id defaults to source->target."""

    def _make(source_id, target_id, type="DEPENDS_ON", rel_id=None, description=None):
        return ArchitectureRelationship(
            id=rel_id or f"{source_id}->{target_id}",
            source_id=source_id,
            target_id=target_id,
            type=type,
            description=description,
        )

    return _make


@pytest.fixture
def sample_elements(make_element):
    """Small As-Is architecture: portal -> orders -> payments/ledger."""
    return [
        make_element("portal", name="Customer Portal", type="web-app", risk="MEDIUM"),
        make_element("orders", name="Order Service", risk="HIGH", owner="team-orders"),
        make_element("payments", name="Payment Gateway", risk="CRITICAL"),
        make_element(
            "ledger", layer="DATA", name="Ledger DB", type="database",
            lifecycle_stage="DEPRECATED",
        ),
        make_element(
            "k8s", layer="TECHNOLOGY", name="Kubernetes Cluster", type="compute-cluster",
            custom_fields={"platform": "CLOUD", "capacity_per_unit": 800},
            cost=120000,
        ),
    ]


@pytest.fixture
def sample_relationships(make_relationship):
    return [
        make_relationship("portal", "orders", "INTEGRATES_WITH"),
        make_relationship("orders", "payments", "DEPENDS_ON"),
        make_relationship("orders", "ledger", "CONSUMES"),
        make_relationship("payments", "ledger", "DEPENDS_ON"),
    ]
