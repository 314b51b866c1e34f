"""Referral tier ladder arithmetic.

Tiers are loaded once per request, normalized (sorted ascending by required
points, thresholds distinct) and then queried with :func:`compute_tier_progress`.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional, Sequence, Union

Number = Union[int, Decimal]


class TierConfigurationError(ValueError):
    pass


@dataclass(frozen=True)
class ReferralTier:
    tier_name: str
    tier_level: int
    required_points: Number
    icon: str = ""
    benefits: str = ""

    @classmethod
    def from_row(cls, row: dict) -> "ReferralTier":
        return cls(
            tier_name=row["tier_name"],
            tier_level=row["tier_level"],
            required_points=row["required_points"],
            icon=row.get("icon") or "",
            benefits=row.get("benefits") or "",
        )

    def as_dict(self) -> dict:
        return {
            "tier_name": self.tier_name,
            "tier_level": self.tier_level,
            "required_points": self.required_points,
            "icon": self.icon,
            "benefits": self.benefits,
        }


@dataclass(frozen=True)
class TierRung:
    tier: ReferralTier
    unlocked: bool


@dataclass(frozen=True)
class TierProgress:
    current_points: Number
    current_tier: ReferralTier
    next_tier: Optional[ReferralTier]
    progress_percent: float
    ladder: tuple[TierRung, ...]

    @property
    def max_tier_reached(self) -> bool:
        return self.next_tier is None

    def as_dict(self) -> dict:
        return {
            "current_points": self.current_points,
            "current_tier": self.current_tier.as_dict(),
            "next_tier": self.next_tier.as_dict() if self.next_tier else None,
            "progress_percent": self.progress_percent,
            "max_tier_reached": self.max_tier_reached,
            "ladder": [
                {"tier": rung.tier.as_dict(), "unlocked": rung.unlocked} for rung in self.ladder
            ],
        }


def normalize_tiers(tiers: Iterable[ReferralTier]) -> tuple[ReferralTier, ...]:
    """Sort tiers by required points and reject empty or duplicated ladders."""
    ordered = tuple(sorted(tiers, key=lambda tier: tier.required_points))
    if not ordered:
        raise TierConfigurationError("No referral tiers configured")
    for lower, upper in zip(ordered, ordered[1:]):
        if lower.required_points == upper.required_points:
            raise TierConfigurationError(
                f"Tiers {lower.tier_name!r} and {upper.tier_name!r} share the threshold "
                f"{lower.required_points}"
            )
    return ordered


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def compute_tier_progress(current_points: Number, tiers: Sequence[ReferralTier]) -> TierProgress:
    """``tiers`` must come from :func:`normalize_tiers`."""
    if not tiers:
        raise TierConfigurationError("No referral tiers configured")

    current_tier = tiers[0]
    for tier in tiers:
        if tier.required_points <= current_points:
            current_tier = tier
        else:
            break

    next_tier = next((tier for tier in tiers if tier.required_points > current_points), None)

    if next_tier is None:
        progress = 100.0
    elif next_tier is current_tier:
        # below the entry threshold of the lowest tier
        progress = 0.0
    else:
        span = next_tier.required_points - current_tier.required_points
        progress = _clamp(float((current_points - current_tier.required_points) / span * 100))

    ladder = tuple(
        TierRung(tier=tier, unlocked=current_points >= tier.required_points) for tier in tiers
    )
    return TierProgress(
        current_points=current_points,
        current_tier=current_tier,
        next_tier=next_tier,
        progress_percent=progress,
        ladder=ladder,
    )
