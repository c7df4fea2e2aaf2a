"""
Referral system configuration.

Contains constants and configuration for the referral system.
"""

from decimal import Decimal

from app.config.business_constants import (
    COMMISSION_DEPTH,
    COMMISSION_LEVELS,
    MAX_LEVEL,
    REQUIRED_ACTIVE_DIRECTS,
)

# 10-level commission: flat credit units per qualifying deposit below
REFERRAL_DEPTH = COMMISSION_DEPTH
REFERRAL_RATES: dict[int, Decimal] = {
    depth: amount for depth, amount in enumerate(COMMISSION_LEVELS, start=1)
}

# Rank ladder
RANK_MAX_LEVEL = MAX_LEVEL
RANK_REQUIRED_DIRECTS = REQUIRED_ACTIVE_DIRECTS

# Max ids per "parent_id IN (...)" query when walking a downline layer
DOWNLINE_BATCH_SIZE = 500
