"""Organization directory entry."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Organization:
    """Organization that owns listed properties."""

    id: str
    display_code: str = ""
    name: str = ""

    @property
    def reference(self) -> str:
        """Identifier stored on property records."""
        return self.display_code or self.id

    def matches(self, value: str) -> bool:
        """Exact match against either identifier."""
        return bool(value) and value in (self.id, self.display_code)

    @classmethod
    def from_dict(cls, raw: dict) -> "Organization":
        return cls(
            id=str(raw.get("id") or ""),
            display_code=str(raw.get("displayCode") or raw.get("display_code") or ""),
            name=str(raw.get("name") or ""),
        )
