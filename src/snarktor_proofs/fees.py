"""
Fee Accounting

Splits the total fee of an aggregation round between the three parties that
earn from it: the prover of the current aggregation level, the submitter of
the inclusion, and the pool for further aggregation levels.
"""

from dataclasses import asdict, dataclass
from typing import Dict

# Percentages of the total fee; the aggregation share takes the remainder
CURRENT_SHARE_PERCENT = 40
INCLUSION_SHARE_PERCENT = 5
AGGREGATION_SHARE_PERCENT = 100 - CURRENT_SHARE_PERCENT - INCLUSION_SHARE_PERCENT


@dataclass(frozen=True)
class FeeSplit:
    """Integer fee shares of one aggregation round."""
    current: int
    inclusion: int
    aggregation: int

    @property
    def total(self) -> int:
        return self.current + self.inclusion + self.aggregation

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


def split_fee(total_fee: int) -> FeeSplit:
    """
    Split a total fee 40/5/55.

    The current and inclusion shares are truncated by integer division; any
    remainder from truncation accrues to the aggregation share, so the three
    shares always sum to exactly total_fee.

    Args:
        total_fee: Non-negative fee in wei

    Returns:
        FeeSplit for the round

    Raises:
        ValueError: If total_fee is negative

    Examples:
        >>> split_fee(1000)
        FeeSplit(current=400, inclusion=50, aggregation=550)
        >>> split_fee(7)
        FeeSplit(current=2, inclusion=0, aggregation=5)
    """
    if total_fee < 0:
        raise ValueError(f"Total fee must be non-negative, got {total_fee}")

    current = total_fee * CURRENT_SHARE_PERCENT // 100
    inclusion = total_fee * INCLUSION_SHARE_PERCENT // 100
    return FeeSplit(
        current=current,
        inclusion=inclusion,
        aggregation=total_fee - current - inclusion,
    )
