"""
Score to discount tier mapping

The breakpoints live in one ordered table evaluated highest threshold
first:

    45+ points -> 40% off
    35-44      -> 30% off
    20-34      -> 20% off
    10-19      -> 10% off
    0-9        ->  0% (no discount is recorded; the player may retry)
"""

from typing import Iterable, Optional

from ..core.errors import ValidationError
from ..models.discount import DiscountResult, DiscountTier, NextThreshold

VALID_PERCENTS = frozenset({0, 10, 20, 30, 40})


class TierTable:
    """Ordered score thresholds, highest first"""

    def __init__(self, tiers: Iterable[tuple[int, int]]):
        ordered = sorted(tiers, key=lambda t: t[0], reverse=True)
        if not ordered:
            raise ValidationError("tier table must not be empty")

        previous_percent = None
        for threshold, percent in ordered:
            if percent not in VALID_PERCENTS or percent == 0:
                raise ValidationError(f"tier percent {percent} is not one of {sorted(VALID_PERCENTS - {0})}")
            if previous_percent is not None and percent >= previous_percent:
                raise ValidationError("tier percents must decrease with the threshold")
            previous_percent = percent

        self.tiers: tuple[DiscountTier, ...] = tuple(
            DiscountTier(threshold=threshold, percent=percent) for threshold, percent in ordered
        )

    @property
    def max_percent(self) -> int:
        return self.tiers[0].percent

    def tier_for(self, score: int) -> int:
        for tier in self.tiers:
            if score >= tier.threshold:
                return tier.percent
        return 0

    def next_threshold(self, score: int) -> Optional[NextThreshold]:
        """Lowest tier the score has not reached yet, or None at the top tier"""
        for tier in reversed(self.tiers):
            if score < tier.threshold:
                return NextThreshold(
                    threshold=tier.threshold,
                    points_needed=tier.threshold - score,
                    percent=tier.percent,
                )
        return None


DEFAULT_TIERS = TierTable([(45, 40), (35, 30), (20, 20), (10, 10)])


def tier_for(score: int, table: TierTable = DEFAULT_TIERS) -> int:
    """Map a final game score to its discount percentage"""
    return table.tier_for(score)


def next_threshold(score: int, table: TierTable = DEFAULT_TIERS) -> Optional[NextThreshold]:
    return table.next_threshold(score)


def validate_percent(percent: int) -> int:
    if percent not in VALID_PERCENTS:
        raise ValidationError(f"discount percent {percent} is not one of {sorted(VALID_PERCENTS)}")
    return percent


_RESULT_COPY: dict[int, tuple[str, str, str]] = {
    40: (
        "Perfect care. They emerged exactly as they dreamed.",
        "You guided them through the dark and the remaking. They fly now, because of you.",
        "🦋",
    ),
    30: (
        "Strong guidance. They will fly.",
        "The transformation was nearly flawless. Their wings catch the moonlight.",
        "✨",
    ),
    20: (
        "They emerged. Some scars, but whole.",
        "The chrysalis was dark, but they made it through.",
        "🌙",
    ),
    10: (
        "They emerged. Something is wrong with their wings.",
        "They try to fly. They cannot. But they are alive.",
        "👁️",
    ),
    0: (
        "The chrysalis failed.",
        "They trusted you to guide them through the dark. You were not ready. The ranch is patient.",
        "💀",
    ),
}


def discount_result(score: int, table: TierTable = DEFAULT_TIERS) -> DiscountResult:
    """Tier outcome plus the copy shown on the results screen"""
    percent = table.tier_for(score)
    message, subtext, emoji = _RESULT_COPY.get(percent, _RESULT_COPY[0])
    return DiscountResult(
        percent=percent,
        message=message,
        subtext=subtext,
        emoji=emoji,
        can_retry=percent == 0,
    )


def format_discount(percent: int) -> str:
    if percent == 0:
        return "No Trust Earned"
    return f"{percent}% Trust"


def progress_message(score: int, table: TierTable = DEFAULT_TIERS) -> str:
    """Mid-game hint towards the next tier"""
    upcoming = table.next_threshold(score)
    current = table.tier_for(score)

    if upcoming is None:
        return "Maximum trust. They will emerge perfect."
    if current == 0 and score < table.tiers[-1].threshold // 2:
        return "They watch. They wait to trust you."
    if current == 0:
        return f"{upcoming.points_needed} more to earn their trust"
    return f"{upcoming.points_needed} more for {upcoming.percent}% trust"
