import math
from typing import Mapping

from app.models import PrizeConfig


def _prize_fields(prize_config) -> tuple[int, list]:
    if isinstance(prize_config, PrizeConfig):
        return prize_config.paid_placements, list(prize_config.amounts)
    if isinstance(prize_config, Mapping):
        raw_paid = prize_config.get("paidPlacements", prize_config.get("paid_placements", 0))
        amounts = prize_config.get("amounts") or []
        try:
            paid = int(raw_paid or 0)
        except (TypeError, ValueError):
            paid = 0
        return paid, list(amounts) if isinstance(amounts, (list, tuple)) else []
    return 0, []


def payout_for(rank, prize_config) -> float:
    """按名次返回奖金；超出付费名次或奖金表缺失时为 0"""
    paid, amounts = _prize_fields(prize_config)
    paid = max(0, paid)
    try:
        rank = int(rank)
    except (TypeError, ValueError):
        return 0.0
    if rank < 1 or rank > paid or rank > len(amounts):
        return 0.0
    try:
        amount = float(amounts[rank - 1])
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(amount) or amount < 0:
        return 0.0
    return amount
