"""Derivation rules keeping a property record internally consistent.

Every mutation goes through :class:`DerivationEngine`. The trigger value is
first coerced (and clamped) by its entry in ``COERCERS``, then the trigger's
row in ``RULES`` computes the dependent writes. A row writes a closed set of
fields and the rows of the fields it writes do not fire, so one pass reaches
the fixpoint and no update loop is possible. Rows for the mirror fields
(``pricing_total_value``, ``tokenization_total_tokens``) write back to their
primaries, which keeps the price per token equal to
``round2(total_value_usdt / total_tokens)`` whichever field was edited last.
"""

from dataclasses import fields
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable

from property_editor.coerce import (
    clamp,
    format_number,
    money,
    round2,
    slugify,
    to_int,
    to_number,
)
from property_editor.generators.unit_types import generate_unit_types
from property_editor.logging import get_logger
from property_editor.models import Documents, PropertyRecord, UnitType, canonical_field

logger = get_logger(__name__)

Coercer = Callable[[PropertyRecord, Any], Any]
Rule = Callable[[PropertyRecord], dict[str, Any]]

_STRING_FIELDS = frozenset(f.name for f in fields(PropertyRecord) if f.type is str)
_LIST_FIELDS = ("features", "amenities", "property_features", "images")


# Coercion of the changed field itself


def _non_negative_float(record: PropertyRecord, raw: Any) -> float:
    return max(0.0, to_number(raw) or 0.0)


def _non_negative_int(record: PropertyRecord, raw: Any) -> int:
    return max(0, to_int(raw) or 0)


def _optional_int(record: PropertyRecord, raw: Any) -> int | None:
    value = to_int(raw)
    return None if value is None else max(0, value)


def _expected_roi(record: PropertyRecord, raw: Any) -> float | None:
    value = to_number(raw)
    if value is None:
        # A completed project always carries its full ROI
        if record.construction_progress == 100 and record.full_roi > 0:
            return record.full_roi
        return None
    return max(0.0, value)


def _available_tokens(record: PropertyRecord, raw: Any) -> int | None:
    value = to_int(raw)
    if value is None:
        return None
    ceiling = max(record.total_tokens, record.tokenization_total_tokens)
    return int(clamp(value, 0, ceiling))


def _progress(record: PropertyRecord, raw: Any) -> int:
    return int(clamp(to_int(raw) or 0, 0, 100))


def _numeric_text(record: PropertyRecord, raw: Any) -> str:
    if raw is None:
        return ""
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return format_number(raw)
    return str(raw).strip()


def _unit_types(record: PropertyRecord, raw: Any) -> list[UnitType]:
    units = []
    for item in raw or []:
        if isinstance(item, UnitType):
            units.append(UnitType(item.type, item.size, item.count))
        elif isinstance(item, str):
            if item.strip():
                units.append(UnitType(type=item.strip(), size="", count=""))
        elif not isinstance(item, dict):
            logger.debug("Skipping unit type entry of type %s", type(item).__name__)
        else:
            units.append(
                UnitType(
                    type=str(item.get("type", "")),
                    size=str(item.get("size", "")),
                    count=str(item.get("count", "")),
                )
            )
    return units


def _string_list(record: PropertyRecord, raw: Any) -> list[str]:
    return [str(item) for item in raw or [] if str(item).strip()]


def _documents(record: PropertyRecord, raw: Any) -> Documents:
    if isinstance(raw, Documents):
        return raw
    # Local import: the normalizer depends on this module
    from property_editor.normalize.documents import normalize_documents

    return normalize_documents(raw)


def _text(record: PropertyRecord, raw: Any) -> str:
    return "" if raw is None else str(raw)


COERCERS: dict[str, Coercer] = {
    "id": lambda record, raw: None if raw is None else str(raw),
    "total_value_usdt": _non_negative_float,
    "total_tokens": _non_negative_int,
    "tokenization_total_tokens": _non_negative_int,
    "tokenization_available_tokens": _available_tokens,
    "expected_roi": _expected_roi,
    "full_roi": _non_negative_float,
    "price_per_token_usdt": lambda record, raw: to_number(raw),
    "construction_progress": _progress,
    "total_units": _optional_int,
    "floors": _optional_int,
    "bedrooms": _non_negative_int,
    "bathrooms": _non_negative_int,
    "area_sqm": _non_negative_float,
    "appreciation_percentage": _non_negative_float,
    "is_featured": lambda record, raw: bool(raw),
    "pricing_total_value": _numeric_text,
    "pricing_expected_roi": _numeric_text,
    "pricing_market_value": _numeric_text,
    "pricing_appreciation": _numeric_text,
    "pricing_min_investment": _numeric_text,
    "tokenization_price_per_token": _numeric_text,
    "tokenization_token_price": _numeric_text,
    "unit_types": _unit_types,
    "documents": _documents,
    **{name: _string_list for name in _LIST_FIELDS},
}


# Dependent writes per changed field

# Price stored on the fetched record; stale once valuation fields change
_STALE_PRICE: dict[str, Any] = {"price_per_token_usdt": None}


def _price_per_token(value: float, tokens: int) -> dict[str, str]:
    price = money(value / tokens)
    return {"tokenization_price_per_token": price, "tokenization_token_price": price}


def _capped_available(record: PropertyRecord, tokens: int) -> dict[str, int]:
    available = record.tokenization_available_tokens
    if available is not None and available > tokens:
        return {"tokenization_available_tokens": tokens}
    return {}


def _banded_roi(value: float) -> str:
    roi = clamp((value / 1_000_000_000) * 2 + 8, 5, 25)
    return str(Decimal(str(roi)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def on_total_value(record: PropertyRecord) -> dict[str, Any]:
    writes: dict[str, Any] = {
        "pricing_total_value": format_number(record.total_value_usdt),
        **_STALE_PRICE,
    }
    if record.total_tokens > 0:
        writes.update(_price_per_token(record.total_value_usdt, record.total_tokens))
    return writes


def on_total_tokens(record: PropertyRecord) -> dict[str, Any]:
    tokens = record.total_tokens
    writes: dict[str, Any] = {"tokenization_total_tokens": tokens, **_STALE_PRICE}
    writes.update(_capped_available(record, tokens))
    if record.total_value_usdt > 0 and tokens > 0:
        writes.update(_price_per_token(record.total_value_usdt, tokens))
    return writes


def on_progress_or_full_roi(record: PropertyRecord) -> dict[str, Any]:
    full_roi = record.full_roi
    if full_roi <= 0:
        return {}
    progress = record.construction_progress
    expected = full_roi if progress == 100 else round2(full_roi * progress / 100)
    return {"expected_roi": expected, "pricing_expected_roi": format_number(expected)}


def on_expected_roi(record: PropertyRecord) -> dict[str, Any]:
    expected = record.expected_roi
    if expected is None:
        return {"pricing_expected_roi": ""}
    writes: dict[str, Any] = {"pricing_expected_roi": format_number(expected)}
    if record.construction_progress == 100:
        writes["full_roi"] = expected
    return writes


def on_pricing_total_value(record: PropertyRecord) -> dict[str, Any]:
    value = to_number(record.pricing_total_value)
    if value is None or value <= 0:
        return {}
    writes: dict[str, Any] = {
        "pricing_expected_roi": _banded_roi(value),
        "total_value_usdt": value,
        **_STALE_PRICE,
    }
    if record.tokenization_total_tokens > 0:
        writes.update(_price_per_token(value, record.tokenization_total_tokens))
    return writes


def on_tokenization_total_tokens(record: PropertyRecord) -> dict[str, Any]:
    tokens = record.tokenization_total_tokens
    writes: dict[str, Any] = {"total_tokens": tokens, **_STALE_PRICE}
    writes.update(_capped_available(record, tokens))
    value = to_number(record.pricing_total_value) or record.total_value_usdt
    if value > 0 and tokens > 0:
        writes.update(_price_per_token(value, tokens))
    return writes


def on_total_units(record: PropertyRecord) -> dict[str, Any]:
    units = generate_unit_types(record.total_units)
    return {} if units is None else {"unit_types": units}


def on_title(record: PropertyRecord) -> dict[str, Any]:
    return {"slug": slugify(record.title)}


RULES: dict[str, Rule] = {
    "total_value_usdt": on_total_value,
    "total_tokens": on_total_tokens,
    "construction_progress": on_progress_or_full_roi,
    "full_roi": on_progress_or_full_roi,
    "expected_roi": on_expected_roi,
    "pricing_total_value": on_pricing_total_value,
    "tokenization_total_tokens": on_tokenization_total_tokens,
    "total_units": on_total_units,
    "title": on_title,
}


class DerivationEngine:
    """Apply one field change and its dependent writes to a record."""

    def __init__(
        self,
        rules: dict[str, Rule] | None = None,
        coercers: dict[str, Coercer] | None = None,
    ) -> None:
        self.rules = RULES if rules is None else rules
        self.coercers = COERCERS if coercers is None else coercers

    def coerce(self, record: PropertyRecord, name: str, raw: Any) -> Any:
        coercer = self.coercers.get(name)
        if coercer is not None:
            return coercer(record, raw)
        if name in _STRING_FIELDS:
            return _text(record, raw)
        return raw

    def apply(self, record: PropertyRecord, name: str, raw: Any) -> list[str]:
        """Set ``name`` on ``record`` and run its rule.

        Returns
        -------
        list[str]
            Names of the fields whose value actually changed, trigger first.
        """
        trigger = canonical_field(name)
        changed: list[str] = []

        value = self.coerce(record, trigger, raw)
        if getattr(record, trigger) != value:
            setattr(record, trigger, value)
            changed.append(trigger)

        rule = self.rules.get(trigger)
        if rule is not None:
            for target, derived in rule(record).items():
                if target == trigger:
                    raise RuntimeError(f"Rule for {trigger} wrote its own trigger")
                if getattr(record, target) != derived:
                    setattr(record, target, derived)
                    changed.append(target)

        logger.debug("Applied %s -> changed %s", trigger, changed)
        return changed


def resync_derived(record: PropertyRecord) -> list[str]:
    """Recompute mirrors and prices from the primary valuation fields.

    Used after bulk writes (load, sample fill) where fields were set without
    going through :meth:`DerivationEngine.apply`.
    """
    writes: dict[str, Any] = {"tokenization_total_tokens": record.total_tokens}
    writes.update(_capped_available(record, record.total_tokens))
    available = record.tokenization_available_tokens
    if available is not None and available < 0:
        writes["tokenization_available_tokens"] = 0
    if record.total_value_usdt > 0:
        writes["pricing_total_value"] = format_number(record.total_value_usdt)
        if record.total_tokens > 0:
            writes.update(_price_per_token(record.total_value_usdt, record.total_tokens))
    if record.expected_roi is not None and not record.pricing_expected_roi:
        writes["pricing_expected_roi"] = format_number(record.expected_roi)
    if record.construction_progress == 100 and record.full_roi > 0:
        writes["expected_roi"] = record.full_roi
    if record.title and not record.slug:
        writes["slug"] = slugify(record.title)

    changed = []
    for name, value in writes.items():
        if getattr(record, name) != value:
            setattr(record, name, value)
            changed.append(name)
    return changed
