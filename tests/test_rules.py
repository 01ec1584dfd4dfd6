"""Tests for the derivation rules engine."""

import random

import pytest

from property_editor.coerce import money
from property_editor.exceptions import UnknownFieldError
from property_editor.models import PropertyRecord, UnitType
from property_editor.rules import DerivationEngine, resync_derived


@pytest.fixture
def engine() -> DerivationEngine:
    return DerivationEngine()


@pytest.fixture
def record() -> PropertyRecord:
    return PropertyRecord()


class TestValuationRules:
    """Price per token and the valuation mirrors."""

    def test_price_per_token_scenario(self, engine: DerivationEngine, record: PropertyRecord) -> None:
        engine.apply(record, "totalValueUSDT", 1_000_000)
        engine.apply(record, "totalTokens", 1000)

        assert record.tokenization_price_per_token == "1000.00"
        assert record.tokenization_token_price == "1000.00"
        assert record.pricing_total_value == "1000000"

    def test_changed_fields_are_reported_in_order(
        self, engine: DerivationEngine, record: PropertyRecord
    ) -> None:
        changed = engine.apply(record, "totalValueUSDT", "1000000")

        assert changed == [
            "total_value_usdt",
            "pricing_total_value",
            "tokenization_price_per_token",
            "tokenization_token_price",
        ]

    def test_total_tokens_updates_mirror(self, engine: DerivationEngine, record: PropertyRecord) -> None:
        engine.apply(record, "totalTokens", "2500")

        assert record.total_tokens == 2500
        assert record.tokenization_total_tokens == 2500

    def test_total_tokens_without_value_leaves_price(
        self, engine: DerivationEngine, record: PropertyRecord
    ) -> None:
        engine.apply(record, "totalTokens", 500)

        assert record.tokenization_price_per_token == ""

    def test_pricing_total_value_bands_roi(self, engine: DerivationEngine, record: PropertyRecord) -> None:
        engine.apply(record, "pricing_total_value", "2000000000")

        assert record.pricing_expected_roi == "12.0"
        assert record.total_value_usdt == 2_000_000_000
        assert record.tokenization_price_per_token == "2000000.00"

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("1000000", "8.0"), ("100000000000", "25.0"), ("5000000000", "18.0")],
    )
    def test_banded_roi_is_clamped(
        self, engine: DerivationEngine, record: PropertyRecord, value: str, expected: str
    ) -> None:
        engine.apply(record, "pricing_total_value", value)

        assert record.pricing_expected_roi == expected

    def test_blank_pricing_total_value_changes_nothing_else(
        self, engine: DerivationEngine, record: PropertyRecord
    ) -> None:
        engine.apply(record, "totalValueUSDT", 1_000_000)
        changed = engine.apply(record, "pricing_total_value", "")

        assert changed == ["pricing_total_value"]
        assert record.total_value_usdt == 1_000_000

    def test_tokenization_total_tokens_resyncs_total_tokens(
        self, engine: DerivationEngine, record: PropertyRecord
    ) -> None:
        engine.apply(record, "pricing_total_value", "1000000")
        engine.apply(record, "tokenization_total_tokens", 2000)

        assert record.total_tokens == 2000
        assert record.tokenization_price_per_token == "500.00"

    @pytest.mark.parametrize(
        "edits",
        [
            [("totalValueUSDT", 750_000), ("totalTokens", 3000)],
            [("totalTokens", 3000), ("totalValueUSDT", 750_000)],
            [("pricing_total_value", "750000"), ("tokenization_total_tokens", 3000)],
            [("tokenization_total_tokens", 3000), ("pricing_total_value", "750000")],
            [("totalValueUSDT", 750_000), ("tokenization_total_tokens", 3000)],
            [("pricing_total_value", "750000"), ("totalTokens", 3000)],
        ],
    )
    def test_price_is_independent_of_edit_order(
        self, engine: DerivationEngine, record: PropertyRecord, edits: list
    ) -> None:
        for name, value in edits:
            engine.apply(record, name, value)

        assert record.tokenization_price_per_token == "250.00"
        assert record.tokenization_token_price == "250.00"

    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("totalValueUSDT", 2_000_000),
            ("totalTokens", 500),
            ("pricing_total_value", "2000000"),
            ("tokenization_total_tokens", 500),
        ],
    )
    def test_valuation_edit_drops_stored_price(
        self, engine: DerivationEngine, name: str, value: object
    ) -> None:
        record = PropertyRecord(total_value_usdt=1_000_000.0, total_tokens=1000, price_per_token_usdt=1000.0)

        changed = engine.apply(record, name, value)

        assert record.price_per_token_usdt is None
        assert "price_per_token_usdt" in changed
        assert record.tokenization_price_per_token == "2000.00"

    def test_unrelated_edit_keeps_stored_price(self, engine: DerivationEngine) -> None:
        record = PropertyRecord(total_value_usdt=1_000_000.0, total_tokens=1000, price_per_token_usdt=1000.0)

        engine.apply(record, "title", "Harbor View")

        assert record.price_per_token_usdt == 1000.0

    def test_price_invariant_under_random_edits(self, engine: DerivationEngine, seed: int) -> None:
        rng = random.Random(seed)
        record = PropertyRecord()
        triggers = ["totalValueUSDT", "pricing_total_value", "totalTokens", "tokenization_total_tokens"]

        for _ in range(200):
            name = rng.choice(triggers)
            if name in ("totalValueUSDT", "pricing_total_value"):
                value = rng.randint(1, 10**9)
            else:
                value = rng.randint(1, 10**6)
            engine.apply(record, name, str(value) if name == "pricing_total_value" else value)

            assert record.total_tokens == record.tokenization_total_tokens
            if record.total_value_usdt > 0 and record.total_tokens > 0:
                expected = money(record.total_value_usdt / record.total_tokens)
                assert record.tokenization_price_per_token == expected
                assert record.tokenization_token_price == expected


class TestTokenClamping:
    """Available tokens stay within [0, totalTokens]."""

    def test_available_clamps_to_total(self, engine: DerivationEngine, record: PropertyRecord) -> None:
        engine.apply(record, "totalTokens", 1000)
        engine.apply(record, "tokenization_available_tokens", 2000)

        assert record.tokenization_available_tokens == 1000

    def test_negative_available_clamps_to_zero(
        self, engine: DerivationEngine, record: PropertyRecord
    ) -> None:
        engine.apply(record, "tokenization_available_tokens", -5)

        assert record.tokenization_available_tokens == 0

    def test_blank_available_is_unset(self, engine: DerivationEngine, record: PropertyRecord) -> None:
        engine.apply(record, "tokenization_available_tokens", "")

        assert record.tokenization_available_tokens is None

    def test_lowering_total_tokens_clamps_available(
        self, engine: DerivationEngine, record: PropertyRecord
    ) -> None:
        engine.apply(record, "tokenization_available_tokens", 800)
        engine.apply(record, "totalTokens", 500)

        assert record.tokenization_available_tokens == 500

    def test_available_invariant_under_random_edits(self, engine: DerivationEngine, seed: int) -> None:
        rng = random.Random(seed)
        record = PropertyRecord()
        triggers = ["totalTokens", "tokenization_total_tokens", "tokenization_available_tokens"]

        for _ in range(200):
            engine.apply(record, rng.choice(triggers), rng.randint(-100, 5000))

            available = record.tokenization_available_tokens
            if available is not None:
                assert 0 <= available <= record.total_tokens


class TestRoiRules:
    """Expected ROI ramps with construction progress."""

    def test_progress_ramp_scenario(self, engine: DerivationEngine, record: PropertyRecord) -> None:
        engine.apply(record, "construction_progress", 50)
        engine.apply(record, "fullROI", 10)

        assert record.expected_roi == 5.0
        assert record.pricing_expected_roi == "5"

    def test_ramp_is_order_independent(self, engine: DerivationEngine, record: PropertyRecord) -> None:
        engine.apply(record, "fullROI", 10)
        engine.apply(record, "construction_progress", 50)

        assert record.expected_roi == 5.0

    def test_ramp_rounds_to_two_decimals(self, engine: DerivationEngine, record: PropertyRecord) -> None:
        engine.apply(record, "fullROI", 12.345)
        engine.apply(record, "construction_progress", 33)

        assert record.expected_roi == 4.07

    def test_full_progress_matches_full_roi(self, engine: DerivationEngine, record: PropertyRecord) -> None:
        engine.apply(record, "fullROI", 14.2)
        engine.apply(record, "construction_progress", 100)

        assert record.expected_roi == record.full_roi == 14.2

    def test_progress_is_clamped(self, engine: DerivationEngine, record: PropertyRecord) -> None:
        engine.apply(record, "construction_progress", 140)

        assert record.construction_progress == 100

    def test_direct_roi_edit_at_completion_sets_full_roi(
        self, engine: DerivationEngine, record: PropertyRecord
    ) -> None:
        engine.apply(record, "construction_progress", 100)
        engine.apply(record, "expectedROI", 11)

        assert record.full_roi == 11
        assert record.pricing_expected_roi == "11"

    def test_clearing_roi_at_completion_keeps_full_roi(
        self, engine: DerivationEngine, record: PropertyRecord
    ) -> None:
        engine.apply(record, "fullROI", 10)
        engine.apply(record, "construction_progress", 100)
        engine.apply(record, "expectedROI", "")

        assert record.expected_roi == 10.0
        assert record.full_roi == 10.0
        assert record.pricing_expected_roi == "10"

    def test_clearing_roi_before_completion_unsets_it(
        self, engine: DerivationEngine, record: PropertyRecord
    ) -> None:
        engine.apply(record, "fullROI", 10)
        engine.apply(record, "construction_progress", 50)
        engine.apply(record, "expectedROI", "")

        assert record.expected_roi is None
        assert record.full_roi == 10.0

    def test_direct_roi_edit_before_completion_keeps_full_roi(
        self, engine: DerivationEngine, record: PropertyRecord
    ) -> None:
        engine.apply(record, "fullROI", 20)
        engine.apply(record, "construction_progress", 40)
        engine.apply(record, "expectedROI", 6)

        assert record.full_roi == 20
        assert record.expected_roi == 6

    def test_progress_without_full_roi_leaves_expected(
        self, engine: DerivationEngine, record: PropertyRecord
    ) -> None:
        engine.apply(record, "expectedROI", 7)
        engine.apply(record, "construction_progress", 60)

        assert record.expected_roi == 7

    def test_completion_invariant_under_random_edits(self, engine: DerivationEngine, seed: int) -> None:
        rng = random.Random(seed)
        record = PropertyRecord()

        for _ in range(200):
            name = rng.choice(["construction_progress", "fullROI", "expectedROI"])
            if name == "construction_progress":
                value = rng.choice([0, 25, 50, 75, 100])
            else:
                value = round(rng.uniform(1, 30), 2)
            engine.apply(record, name, value)

            if record.construction_progress == 100 and record.full_roi > 0:
                assert record.expected_roi == record.full_roi


class TestCollectionAndTextRules:
    def test_total_units_generates_unit_types(
        self, engine: DerivationEngine, record: PropertyRecord
    ) -> None:
        engine.apply(record, "total_units", "3")

        assert [unit.to_dict() for unit in record.unit_types] == [
            {"type": "1 Bedroom", "size": "1200 sq ft", "count": "1"},
            {"type": "2 Bedroom", "size": "1600 sq ft", "count": "2"},
            {"type": "3 Bedroom", "size": "2000 sq ft", "count": "3"},
        ]

    def test_manual_unit_edit_survives_until_total_units_changes(
        self, engine: DerivationEngine, record: PropertyRecord
    ) -> None:
        engine.apply(record, "total_units", 2)
        record.unit_types[0] = UnitType(type="Studio", size="500 sq ft", count="6")
        engine.apply(record, "floors", 12)

        assert record.unit_types[0].type == "Studio"

        engine.apply(record, "total_units", 2)
        assert record.unit_types[0].type == "1 Bedroom"

    @pytest.mark.parametrize("count", [0, 11, ""])
    def test_out_of_range_total_units_keeps_unit_types(
        self, engine: DerivationEngine, record: PropertyRecord, count: object
    ) -> None:
        engine.apply(record, "total_units", 2)
        engine.apply(record, "total_units", count)

        assert len(record.unit_types) == 2

    def test_bare_string_unit_types_are_kept(
        self, engine: DerivationEngine, record: PropertyRecord
    ) -> None:
        engine.apply(
            record,
            "unit_types",
            ["Penthouse", "  ", None, {"type": "Studio", "size": "500 sq ft", "count": 4}],
        )

        assert record.unit_types == [
            UnitType(type="Penthouse", size="", count=""),
            UnitType(type="Studio", size="500 sq ft", count="4"),
        ]

    def test_title_derives_slug(self, engine: DerivationEngine, record: PropertyRecord) -> None:
        engine.apply(record, "title", "Harbor  View -- Residency!")

        assert record.slug == "harbor-view-residency"


class TestEngineContract:
    def test_unknown_field_is_rejected(self, engine: DerivationEngine, record: PropertyRecord) -> None:
        with pytest.raises(UnknownFieldError):
            engine.apply(record, "notAField", 1)

    def test_rule_may_not_write_its_trigger(self, record: PropertyRecord) -> None:
        engine = DerivationEngine(rules={"floors": lambda r: {"floors": 3}})

        with pytest.raises(RuntimeError):
            engine.apply(record, "floors", 5)

    def test_resync_derived_restores_mirrors(self, record: PropertyRecord) -> None:
        record.total_value_usdt = 500_000.0
        record.total_tokens = 200
        record.tokenization_available_tokens = 900

        changed = resync_derived(record)

        assert record.tokenization_total_tokens == 200
        assert record.tokenization_available_tokens == 200
        assert record.pricing_total_value == "500000"
        assert record.tokenization_price_per_token == "2500.00"
        assert "tokenization_price_per_token" in changed
