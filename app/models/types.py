"""
Standard type definitions for database models.

Provides consistent types for monetary fields across all models.
"""

from sqlalchemy import DECIMAL

# Standard money type for amounts, balances, commissions
# Precision: 18 digits total, 8 after decimal point
# Suitable for: credit units, withdrawals, history entries
# Range: up to 9,999,999,999.99999999
MoneyType = DECIMAL(18, 8)

# Large money type for blockchain transactions
# Precision: 36 digits total, 18 after decimal point
# Suitable for: exact on-chain token amounts (18-decimal tokens)
BigMoneyType = DECIMAL(36, 18)
