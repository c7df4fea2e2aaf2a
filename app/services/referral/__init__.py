"""
Referral services package.

Contains modular services for referral processing:
- config: Commission table and rank ladder constants
- chain_manager: Upline walks and parent linking
- commission_distributor: Per-level commission after a credited deposit
- rank_calculator: Level/rank from the active downline
"""

from app.services.referral.chain_manager import ReferralChainManager
from app.services.referral.commission_distributor import (
    CommissionDistributor,
    CommissionEntry,
    DistributionResult,
)
from app.services.referral.config import REFERRAL_DEPTH, REFERRAL_RATES
from app.services.referral.rank_calculator import RankCalculator, RankResult


__all__ = [
    # Configuration
    "REFERRAL_DEPTH",
    "REFERRAL_RATES",
    # Managers
    "ReferralChainManager",
    "RankCalculator",
    "RankResult",
    # Commission
    "CommissionDistributor",
    "CommissionEntry",
    "DistributionResult",
]
