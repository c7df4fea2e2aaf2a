"""
Business logic constants.

Central location for business rules shared by the referral, deposit and
withdrawal services. This module can be imported anywhere without circular
dependencies.
"""

from decimal import Decimal


# Commission credited to the ancestor at each depth (index 0 = direct parent),
# in credit units per qualifying deposit event.
COMMISSION_LEVELS: tuple[Decimal, ...] = (
    Decimal("10"),
    Decimal("5"),
    Decimal("3"),
    Decimal("3"),
    Decimal("2"),
    Decimal("2"),
    Decimal("1.5"),
    Decimal("1.5"),
    Decimal("1"),
    Decimal("1"),
)

COMMISSION_DEPTH = len(COMMISSION_LEVELS)

# Upper bound of all commissions one deposit event can generate
MAX_COMMISSION_PER_EVENT = sum(COMMISSION_LEVELS, Decimal("0"))

# Rank ladder: a user needs this many active direct referrals,
# each at (level - 1) or higher, to reach a level.
MAX_LEVEL = 10
REQUIRED_ACTIVE_DIRECTS = 3

RANK_LABELS: dict[int, str] = {
    0: "Starter",
    1: "Bronze",
    2: "Silver",
    3: "Gold",
    4: "Platinum",
    5: "Sapphire",
    6: "Ruby",
    7: "Emerald",
    8: "Diamond",
    9: "Crown",
    10: "Legender",
}

DEFAULT_RANK = RANK_LABELS[0]

DAILY_BONUS_ENTRY_NAME = "Daily Bonus"

# Ledger precision (matches MoneyType)
MONEY_QUANT = Decimal("0.00000001")


def level_to_rank(level: int) -> str:
    """
    Map a level to its rank label.

    Args:
        level: Level 0-10

    Returns:
        Rank label, "Starter" for anything outside the ladder
    """
    return RANK_LABELS.get(level, DEFAULT_RANK)
