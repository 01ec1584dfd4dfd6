"""Tests for domain models."""

import pytest

from property_editor.exceptions import UnknownFieldError
from property_editor.models import (
    Brochure,
    ComplianceDocument,
    DocumentKind,
    Documents,
    Organization,
    PropertyRecord,
    PropertyStatus,
    PropertyType,
    UnitType,
    canonical_field,
)


class TestPropertyRecord:
    """Tests for PropertyRecord defaults."""

    def test_create_mode_defaults(self) -> None:
        record = PropertyRecord()

        assert record.id is None
        assert record.type == PropertyType.RESIDENTIAL.value
        assert record.status == PropertyStatus.ACTIVE.value
        assert record.total_tokens == record.tokenization_total_tokens == 1000
        assert record.expected_roi is None
        assert record.images == []
        assert not record.documents.has_any

    def test_collections_are_not_shared(self) -> None:
        first = PropertyRecord()
        second = PropertyRecord()
        first.features.append("Pool")

        assert second.features == []


class TestCanonicalField:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("totalValueUSDT", "total_value_usdt"),
            ("availableTokens", "tokenization_available_tokens"),
            ("propertyType", "type"),
            ("construction_progress", "construction_progress"),
        ],
    )
    def test_aliases(self, name: str, expected: str) -> None:
        assert canonical_field(name) == expected

    def test_unknown(self) -> None:
        with pytest.raises(UnknownFieldError, match="bogus"):
            canonical_field("bogus")


class TestDocuments:
    def test_has_any(self) -> None:
        assert Documents(brochure=Brochure(url="b.pdf")).has_any
        assert Documents(compliance=[ComplianceDocument(url="c.pdf")]).has_any
        assert not Documents().has_any


class TestUnitType:
    def test_to_dict(self) -> None:
        unit = UnitType(type="Studio", size="500 sq ft", count="3")

        assert unit.to_dict() == {"type": "Studio", "size": "500 sq ft", "count": "3"}


class TestOrganization:
    def test_reference_prefers_display_code(self) -> None:
        assert Organization(id="9f1c", display_code="ORG-000001").reference == "ORG-000001"
        assert Organization(id="9f1c").reference == "9f1c"

    def test_matches_exactly(self) -> None:
        org = Organization(id="9f1c", display_code="ORG-000001")

        assert org.matches("9f1c")
        assert org.matches("ORG-000001")
        assert not org.matches("ORG-00000")
        assert not org.matches("")

    @pytest.mark.parametrize("key", ["displayCode", "display_code"])
    def test_from_dict(self, key: str) -> None:
        org = Organization.from_dict({"id": "9f1c", key: "ORG-000001", "name": "Blue Bay"})

        assert org == Organization(id="9f1c", display_code="ORG-000001", name="Blue Bay")


class TestEnums:
    def test_document_kind_values(self) -> None:
        assert DocumentKind("floorPlan") is DocumentKind.FLOOR_PLAN

    def test_status_catalog(self) -> None:
        assert "generating-income" in {status.value for status in PropertyStatus}
        assert len(PropertyStatus) == 9
