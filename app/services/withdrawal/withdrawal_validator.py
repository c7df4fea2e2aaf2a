"""
Withdrawal validation service.

Stateless checks on a withdrawal request: amount and destination address.
The balance check needs a locked user row and lives in the request handler.
"""

from dataclasses import dataclass
from decimal import Decimal

from app.config.settings import Settings, settings as default_settings
from app.utils.validation import is_valid_payout_address
from app.validators.unified import validate_amount


@dataclass
class ValidationResult:
    """Result of withdrawal validation."""

    is_valid: bool
    error_message: str | None = None
    error_code: str | None = None
    amount: Decimal | None = None
    address: str | None = None

    @classmethod
    def success(cls, amount: Decimal, address: str) -> "ValidationResult":
        """Create a successful validation result."""
        return cls(is_valid=True, amount=amount, address=address)

    @classmethod
    def error(
        cls, message: str, code: str | None = None
    ) -> "ValidationResult":
        """Create an error validation result."""
        return cls(is_valid=False, error_message=message, error_code=code)


class WithdrawalValidator:
    """Validator for withdrawal requests."""

    def __init__(self, app_settings: Settings | None = None) -> None:
        self.settings = app_settings or default_settings

    def validate_request(
        self, address: str | None, amount: Decimal | str | int | float | None
    ) -> ValidationResult:
        """
        Validate amount and address.

        Args:
            address: Destination address
            amount: Requested amount

        Returns:
            ValidationResult with the parsed amount and trimmed address
        """
        minimum = self.settings.withdraw_min
        currency = self.settings.withdraw_currency

        is_valid, parsed, _ = validate_amount(amount)
        if not is_valid or parsed is None or parsed < minimum:
            return ValidationResult.error(
                f"Minimum withdrawal is {minimum} {currency}", code="AMOUNT"
            )

        address = address.strip() if isinstance(address, str) else ""
        if not is_valid_payout_address(address):
            return ValidationResult.error(
                "Enter a valid BEP20 (BSC) address starting with 0x",
                code="ADDRESS",
            )

        return ValidationResult.success(parsed, address)
