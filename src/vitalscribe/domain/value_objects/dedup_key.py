"""
Dedup key value object: the (owner, normalized name) pair that identifies a patient.
"""

from dataclasses import dataclass


def normalize_name_key(name: str) -> str:
    """Trim and case-fold a display name; inner spacing is significant."""
    if not name:
        return ""
    return name.strip().casefold()


@dataclass(frozen=True)
class DedupKey:
    """Immutable uniqueness key for a patient within one owner's records."""

    owner_id: str
    name_key: str

    def __post_init__(self) -> None:
        """Validate key parts."""
        if not self.owner_id:
            raise ValueError("Dedup key requires an owner id")
        if not self.name_key:
            raise ValueError("Dedup key requires a non-empty name")

    def __str__(self) -> str:
        return f"{self.owner_id}:{self.name_key}"
