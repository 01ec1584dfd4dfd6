"""Pytest configuration and fixtures."""

import random
from typing import Any

import pytest

from property_editor.models import Brochure, Documents, Organization, PropertyRecord


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def rng(seed: int) -> random.Random:
    """Seeded random source."""
    return random.Random(seed)


@pytest.fixture
def organizations() -> list[Organization]:
    """Sample organization directory."""
    return [
        Organization(id="9f1c", display_code="ORG-000001", name="Blue Bay Developers"),
        Organization(id="a7d2", display_code="ORG-000002", name="Harbor Estates"),
    ]


@pytest.fixture
def raw_property() -> dict[str, Any]:
    """Fetched property in the canonical backend shape."""
    return {
        "id": "PROP-000007",
        "organizationId": "a7d2",
        "type": "residential",
        "status": "active",
        "title": "Harbor View Residency",
        "description": "Sea-facing apartments",
        "totalValueUSDT": 1_000_000,
        "totalTokens": 1000,
        "availableTokens": 400,
        "expectedROI": 12.5,
        "location_city": "Karachi",
        "location_country": "Pakistan",
        "construction_progress": 50,
        "total_units": 2,
        "unit_types": [{"type": "Studio", "size": "500 sq ft", "count": "8"}],
        "images": {"urls": ["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg"]},
        "documents": {
            "brochure": {"url": "https://cdn.example.com/brochure.pdf", "name": "Brochure"},
            "floorPlan": None,
            "compliance": [],
        },
    }


@pytest.fixture
def legacy_raw_property() -> dict[str, Any]:
    """Fetched property saved by the older form: flat lists and nested groups."""
    return {
        "id": "PROP-000003",
        "organization": {"id": "9f1c", "displayCode": "ORG-000001"},
        "type": "commercial",
        "status": "funding",
        "title": "Skyline Towers",
        "pricing": {"totalValue": "2000000", "expectedROI": "9.5"},
        "tokenization": {"totalTokens": 4000, "availableTokens": 5000},
        "location": {"city": "Lahore", "country": "Pakistan", "lat": 31.5204, "lng": 74.3587},
        "features": {"amenities": ["Parking", "Gym"], "unit_types": [{"type": "Shop", "size": "300 sq ft", "count": 4}]},
        "images": {
            "gallery": ["https://cdn.example.com/g1.jpg"],
            "main": {"url": "https://cdn.example.com/main.jpg", "alt": "Front"},
        },
        "documents": [
            {"name": "Approval Letter", "url": "https://example.com/approval.pdf", "type": "approval"},
            {"name": "Floor Plan", "url": "https://example.com/floorplan.pdf", "type": "floorplan"},
            {"name": "Sales Brochure", "url": "https://example.com/brochure.pdf", "type": "marketing"},
        ],
    }


@pytest.fixture
def valid_record() -> PropertyRecord:
    """Record that passes every submission check."""
    return PropertyRecord(
        organization_id="ORG-000001",
        type="residential",
        status="active",
        total_value_usdt=1_000_000.0,
        total_tokens=1000,
        expected_roi=10.0,
        title="Harbor View Residency",
        description="Sea-facing apartments",
        location_city="Karachi",
        location_country="Pakistan",
        documents=Documents(brochure=Brochure(url="https://cdn.example.com/brochure.pdf")),
    )
