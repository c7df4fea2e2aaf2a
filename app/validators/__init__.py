"""
Validators package.

Provides common validation functions for user input.
"""

from app.validators.unified import (
    validate_amount,
    validate_email,
    validate_wallet_address,
)


__all__ = [
    "validate_amount",
    "validate_email",
    "validate_wallet_address",
]
