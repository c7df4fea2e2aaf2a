"""Response payloads for ORM objects and service results."""

from typing import Any

from app.models.user import User
from app.models.withdrawal import Withdrawal
from app.services.referral import DistributionResult, RankResult


def user_payload(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "referralCode": user.referral_code,
        "parentId": user.parent_id,
        "referralsCount": user.referrals_count,
        "balance": user.balance,
        "bonusEarned": user.bonus_earned,
        "dailyProfit": user.daily_profit,
        "withdrawnTotal": user.withdrawn_total,
        "level": user.level,
        "rank": user.rank,
        "dailyProfitEligible": user.daily_profit_eligible,
        "createdAt": user.created_at,
    }


def withdrawal_payload(withdrawal: Withdrawal) -> dict[str, Any]:
    return {
        "id": withdrawal.id,
        "userId": withdrawal.user_id,
        "amount": withdrawal.amount,
        "currency": withdrawal.currency,
        "chain": withdrawal.chain,
        "address": withdrawal.address,
        "status": withdrawal.status,
        "txId": withdrawal.tx_id,
        "note": withdrawal.note,
        "approvedBy": withdrawal.approved_by,
        "approvedAt": withdrawal.approved_at,
        "createdAt": withdrawal.created_at,
    }


def rank_payload(result: RankResult) -> dict[str, Any]:
    return {"level": result.level, "rank": result.rank}


def commission_payload(result: DistributionResult | None) -> dict[str, Any] | None:
    if result is None:
        return None
    return {
        "totalPaid": result.total_paid,
        "paidCount": result.paid_count,
        "pendingCount": result.pending_count,
    }
