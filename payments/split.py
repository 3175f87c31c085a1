from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

from django.conf import settings


@dataclass(frozen=True)
class SplitAmounts:
    branch_amount: int
    hq_amount: int
    branch_ratio: int
    hq_ratio: int


def default_hq_ratio() -> int:
    return int(getattr(settings, "SETTLEMENT", {}).get("HQ_RATIO", 10))


def split_amounts(total, hq_ratio: Optional[int] = None) -> SplitAmounts:
    """
    Split ``total`` (integral KRW) between branch and HQ.

    The HQ share is rounded half-up and the branch gets the remainder,
    so the two parts always add back to ``total``.
    """
    if isinstance(total, bool):
        raise ValueError("total must be an integer amount")
    try:
        total = Decimal(str(total))
    except InvalidOperation:
        raise ValueError("total must be an integer amount")
    if not total.is_finite() or total != total.to_integral_value() or total <= 0:
        raise ValueError("total must be a positive integer amount")

    hq_ratio = default_hq_ratio() if hq_ratio is None else int(hq_ratio)
    if not 0 <= hq_ratio <= 100:
        raise ValueError("hq_ratio must be between 0 and 100")

    hq = int((total * hq_ratio / Decimal(100)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    branch = int(total) - hq
    return SplitAmounts(branch_amount=branch, hq_amount=hq, branch_ratio=100 - hq_ratio, hq_ratio=hq_ratio)
