"""Sample-data fill for empty or still-default record fields."""

from __future__ import annotations

import random
from datetime import date, timedelta
from typing import Any, Callable, Iterable

from property_editor.coerce import format_number, is_blank, round2
from property_editor.generators.base import BaseGenerator
from property_editor.generators.unit_types import generate_unit_types
from property_editor.logging import get_logger
from property_editor.models import Organization, PropertyRecord, PropertyType
from property_editor.rules import resync_derived

logger = get_logger(__name__)

# Asset fields hold uploaded files and are never replaced by samples
NEVER_FILLED = frozenset({"images", "documents"})

# Values a fresh form starts with; treated like empty
PLACEHOLDERS: dict[str, tuple[Any, ...]] = {
    "total_value_usdt": (0,),
    "total_tokens": (1000,),
    "tokenization_available_tokens": (1000,),
    "expected_roi": (0,),
    "full_roi": (0,),
    "construction_progress": (0,),
    "bedrooms": (2,),
    "bathrooms": (2,),
    "area_sqm": (100,),
    "appreciation_percentage": (20,),
}

FALLBACK_ORGANIZATION = "ORG-000001"
PKR_PER_USDT = 280

TITLES = [
    "Luxury Heights Residency",
    "Golden Gate Apartments",
    "Skyline Towers",
    "Emerald Gardens",
    "Royal Plaza Complex",
    "Diamond Heights",
    "Crystal Residences",
    "Pearl Towers",
    "Sapphire Gardens",
    "Platinum Heights",
]

DESCRIPTIONS = [
    "A premium residential complex offering modern amenities and luxury living in the heart of the city.",
    "State-of-the-art residential development with world-class facilities and breathtaking views.",
    "Exclusive residential project featuring contemporary design and premium lifestyle amenities.",
    "Luxury residential complex with modern architecture and comprehensive lifestyle facilities.",
    "Premium residential development offering sophisticated living with world-class amenities.",
]

PROJECT_TYPES = ["residential", "commercial", "mixed-use", "residential-commercial", "retail", "office"]

FEATURES = [
    "Swimming Pool",
    "Gymnasium",
    "Parking",
    "Security",
    "Garden",
    "Elevator",
    "Power Backup",
    "Water Treatment",
]

AMENITIES = FEATURES[:3] + ["24/7 Security"] + FEATURES[4:] + ["Club House", "Playground"]

PROPERTY_FEATURES = [
    "Modern Architecture",
    "Energy Efficient",
    "Smart Home Features",
    "Premium Finishes",
    "High Ceilings",
    "Balcony Access",
]

PROGRESS_STEPS = [0, 25, 50, 75, 100]


def is_empty(value: Any) -> bool:
    return is_blank(value)


def matches_known_placeholder(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return False
    return value in PLACEHOLDERS.get(name, ())


def is_fillable(name: str, value: Any) -> bool:
    """Whether a sample value may replace ``value`` for field ``name``."""
    if name in NEVER_FILLED:
        return False
    return is_empty(value) or matches_known_placeholder(name, value)


def _parse_date(text: str) -> date | None:
    try:
        return date.fromisoformat(text)
    except (TypeError, ValueError):
        return None


class FillDefaultsGenerator(BaseGenerator):
    """Fill empty or placeholder fields of a record with plausible samples.

    Fields are visited in a fixed order and each sample may read the values
    filled before it, so valuation, tokens and ROI stay consistent with
    whatever the user already entered.
    """

    def __init__(
        self,
        seed: int | None = None,
        locale: str = "en_US",
        rng: random.Random | None = None,
        organizations: Iterable[Organization] | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        super().__init__(seed=seed, locale=locale, rng=rng)
        self.organizations = list(organizations or [])
        self.today = today

    def fill(self, record: PropertyRecord) -> list[str]:
        """Fill ``record`` in place and return the names of changed fields."""
        fillable = {name for name, _ in self._makers(record) if is_fillable(name, getattr(record, name))}
        changed: list[str] = []
        for name, make in self._makers(record):
            if name not in fillable:
                continue
            value = make(fillable)
            if value != getattr(record, name):
                setattr(record, name, value)
                changed.append(name)

        for name in resync_derived(record):
            if name not in changed:
                changed.append(name)
        logger.info("Filled %d fields with sample data", len(changed))
        return changed

    def _makers(self, record: PropertyRecord) -> list[tuple[str, Callable[[set[str]], Any]]]:
        rng = self.rng
        fake = self.fake
        today = self.today()

        def organization(_: set[str]) -> str:
            if self.organizations:
                return rng.choice(self.organizations).reference
            return FALLBACK_ORGANIZATION

        def total_value(_: set[str]) -> float:
            return float(rng.randint(1_000_000_000, 20_999_999_999) // PKR_PER_USDT)

        def total_tokens(fillable: set[str]) -> int:
            floor = 0
            if "tokenization_available_tokens" not in fillable:
                floor = record.tokenization_available_tokens or 0
            return rng.randint(max(10_000, floor), max(209_999, floor))

        def available_tokens(_: set[str]) -> int:
            return int(record.total_tokens * rng.uniform(0.2, 1.0))

        def progress(fillable: set[str]) -> int:
            step = rng.choice(PROGRESS_STEPS)
            user_rois = {"expected_roi", "full_roi"}.isdisjoint(fillable)
            if step == 100 and user_rois and record.expected_roi != record.full_roi:
                # Completion would force expected ROI onto the user's full ROI
                step = 75
            return step

        def full_roi(fillable: set[str]) -> float:
            if (
                "expected_roi" not in fillable
                and record.expected_roi is not None
                and record.construction_progress == 100
            ):
                return record.expected_roi
            return round(rng.uniform(8, 20), 1)

        def expected_roi(_: set[str]) -> float:
            if record.full_roi > 0:
                if record.construction_progress == 100:
                    return record.full_roi
                return round2(record.full_roi * record.construction_progress / 100)
            return round(rng.uniform(5, 20), 1)

        def start_date(_: set[str]) -> str:
            return (today + timedelta(days=30 * rng.randint(0, 11))).isoformat()

        def completion(_: set[str]) -> str:
            start = _parse_date(record.start_date) or today
            return (start + timedelta(days=30 * rng.randint(12, 35))).isoformat()

        def handover(_: set[str]) -> str:
            completed = _parse_date(record.expected_completion) or today
            return (completed + timedelta(days=30)).isoformat()

        def short_description(_: set[str]) -> str:
            area = record.location_address.split(",")[0] or record.location_city
            return f"Premium {record.type or PropertyType.RESIDENTIAL.value} development in {area}"

        def some_of(options: list[str]) -> Callable[[set[str]], list[str]]:
            return lambda _: rng.sample(options, k=rng.randint(min(4, len(options)), len(options)))

        return [
            ("organization_id", organization),
            ("type", lambda _: rng.choice(list(PropertyType)).value),
            ("status", lambda _: "active"),
            ("title", lambda _: rng.choice(TITLES)),
            ("description", lambda _: rng.choice(DESCRIPTIONS)),
            ("location_address", lambda _: fake.street_address()),
            ("location_city", lambda _: fake.city()),
            ("location_state", lambda _: fake.state()),
            ("location_country", lambda _: fake.country()),
            ("location_latitude", lambda _: f"{float(fake.latitude()):.6f}"),
            ("location_longitude", lambda _: f"{float(fake.longitude()):.6f}"),
            ("short_description", short_description),
            ("project_type", lambda _: rng.choice(PROJECT_TYPES)),
            ("floors", lambda _: rng.randint(5, 24)),
            ("total_units", lambda _: rng.randint(1, 10)),
            ("total_value_usdt", total_value),
            ("total_tokens", total_tokens),
            ("tokenization_available_tokens", available_tokens),
            ("construction_progress", progress),
            ("full_roi", full_roi),
            ("expected_roi", expected_roi),
            ("start_date", start_date),
            ("expected_completion", completion),
            ("handover_date", handover),
            ("pricing_market_value", lambda _: format_number(int(record.total_value_usdt * 0.9))),
            ("pricing_appreciation", lambda _: f"{rng.uniform(10, 30):.1f}"),
            ("pricing_min_investment", lambda _: str(rng.randint(100_000, 1_099_999))),
            ("unit_types", lambda _: generate_unit_types(record.total_units) or generate_unit_types(3)),
            ("features", some_of(FEATURES)),
            ("amenities", some_of(AMENITIES)),
            ("property_features", some_of(PROPERTY_FEATURES)),
            ("bedrooms", lambda _: rng.randint(1, 4)),
            ("bathrooms", lambda _: rng.randint(1, 3)),
            ("area_sqm", lambda _: float(rng.randint(100, 299))),
            ("appreciation_percentage", lambda _: round(rng.uniform(10, 40), 2)),
        ]


def fill_defaults(
    record: PropertyRecord,
    rng: random.Random | None = None,
    organizations: Iterable[Organization] | None = None,
    locale: str = "en_US",
    today: Callable[[], date] = date.today,
) -> tuple[PropertyRecord, list[str]]:
    """Fill empty or placeholder fields of ``record`` with sample data.

    Parameters
    ----------
    record : PropertyRecord
        Record to fill in place.
    rng : random.Random | None
        Random source; inject a seeded one for deterministic output.
    organizations : Iterable[Organization] | None
        Directory to draw an organization from.
    today : Callable[[], date]
        Source of the current date that sample schedules start from.

    Returns
    -------
    tuple[PropertyRecord, list[str]]
        The same record and the names of the fields that changed.
    """
    generator = FillDefaultsGenerator(rng=rng, organizations=organizations, locale=locale, today=today)
    changed = generator.fill(record)
    return record, changed
