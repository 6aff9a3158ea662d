# labtrack/utils/tags.py
"""
Tag codec: converts between the integer Tags bitmask and named flags.

Bit layout (one bit per tag, low to high):
  0 White   1 Blue   2 Green   3 Orange   4 Admin   5 Supervisor

White/Blue/Green/Orange are training tags (set by roster import);
Admin/Supervisor are role tags (set by an administrator).
"""

from dataclasses import dataclass, fields
from typing import Mapping

from labtrack.exceptions import InvalidInputError

TAG_NAMES = ("white", "blue", "green", "orange", "admin", "supervisor")
TAG_BITS = {name: bit for bit, name in enumerate(TAG_NAMES)}

WHITE, BLUE, GREEN, ORANGE, ADMIN, SUPERVISOR = (1 << bit for bit in range(len(TAG_NAMES)))
TRAINING_TAGS = WHITE | BLUE | GREEN | ORANGE
ROLE_TAGS = ADMIN | SUPERVISOR
ALL_TAGS = TRAINING_TAGS | ROLE_TAGS


def _check_mask(tags) -> int:
    if isinstance(tags, bool) or not isinstance(tags, int):
        raise InvalidInputError(f"Tags must be an integer, got {tags!r}")
    if tags < 0:
        raise InvalidInputError(f"Tags must be non-negative, got {tags}")
    return tags


def validate_mask(tags) -> int:
    """Reject anything outside the defined bits."""
    tags = _check_mask(tags)
    if tags & ~ALL_TAGS:
        raise InvalidInputError(f"Tags {tags} uses bits outside 0..{ALL_TAGS}")
    return tags


def decompose(tags: int) -> dict:
    """Bitmask → {white, blue, green, orange, admin, supervisor: bool}."""
    tags = _check_mask(tags)
    return {name: bool((tags >> bit) & 1) for name, bit in TAG_BITS.items()}


def compose(flags: Mapping[str, bool]) -> int:
    """Named flags → bitmask. Missing names count as False."""
    unknown = set(flags) - set(TAG_BITS)
    if unknown:
        raise InvalidInputError(f"Unknown tag name(s): {', '.join(sorted(unknown))}")
    mask = 0
    for name, value in flags.items():
        if value:
            mask |= 1 << TAG_BITS[name]
    return mask


@dataclass(frozen=True)
class TagSet:
    white: bool = False
    blue: bool = False
    green: bool = False
    orange: bool = False
    admin: bool = False
    supervisor: bool = False

    @classmethod
    def from_mask(cls, tags: int) -> "TagSet":
        return cls(**decompose(tags))

    @property
    def mask(self) -> int:
        return compose({f.name: getattr(self, f.name) for f in fields(self)})

    @property
    def training(self) -> tuple:
        return (self.white, self.blue, self.green, self.orange)

    def with_training(self, white: bool, blue: bool, green: bool, orange: bool) -> "TagSet":
        """Replace the four training tags, keep the role tags."""
        return TagSet(bool(white), bool(blue), bool(green), bool(orange), self.admin, self.supervisor)

    def column_values(self) -> dict:
        """Mirror-column attribute name → value, e.g. {"white_tag": True, ...}."""
        return {f"{f.name}_tag": getattr(self, f.name) for f in fields(self)}
