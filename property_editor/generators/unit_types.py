"""Unit breakdown generator driven by the total unit count."""

from property_editor.models import UnitType

MIN_UNITS = 1
MAX_UNITS = 10


def generate_unit_types(count: int | None) -> list[UnitType] | None:
    """Generate one unit type per bedroom count.

    Entry ``i`` (1-based) is ``"{i} Bedroom"`` of ``800 + 400 * i`` sq ft with
    a count of ``i``.

    Returns
    -------
    list[UnitType] | None
        The generated rows, or None when ``count`` is outside 1-10 and the
        existing collection should be left untouched.
    """
    if count is None or not MIN_UNITS <= count <= MAX_UNITS:
        return None
    return [
        UnitType(type=f"{i} Bedroom", size=f"{800 + i * 400} sq ft", count=str(i))
        for i in range(1, count + 1)
    ]
