"""Unified validators for user input."""

from decimal import Decimal, InvalidOperation

from web3 import Web3


def validate_wallet_address(address: str) -> tuple[bool, str | None]:
    """
    Validate an EVM (BEP-20) wallet address.

    Args:
        address: Wallet address to validate

    Returns:
        Tuple of (is_valid, error_message)
        - (True, None) if valid
        - (False, error_message) if invalid

    Examples:
        >>> validate_wallet_address("0x1234567890123456789012345678901234567890")
        (True, None)
        >>> validate_wallet_address("invalid")
        (False, "Address must start with 0x")
    """
    if not address or not isinstance(address, str):
        return False, "Address is empty"

    address = address.strip()

    if not address:
        return False, "Address is empty"

    if not address.startswith("0x"):
        return False, "Address must start with 0x"

    if len(address) != 42:
        return False, "Address must be 42 characters"

    try:
        int(address[2:], 16)
    except ValueError:
        return False, "Invalid address format"

    try:
        Web3.to_checksum_address(address)
        return True, None
    except (ValueError, TypeError) as e:
        from loguru import logger
        logger.debug(f"Address validation failed for {address}: {e}")
        return False, "Invalid address format"


def validate_amount(
    amount: str | int | float | Decimal | None,
    min_val: Decimal = Decimal("0"),
    max_val: Decimal | None = None,
) -> tuple[bool, Decimal | None, str | None]:
    """
    Validate and parse a monetary amount.

    Floats are converted through str() so 80.1 stays 80.1.

    Args:
        amount: Amount to validate (string or number)
        min_val: Minimum allowed value
        max_val: Maximum allowed value (optional)

    Returns:
        Tuple of (is_valid, parsed_value, error_message)

    Examples:
        >>> validate_amount("100.50")
        (True, Decimal('100.50'), None)
        >>> validate_amount("-10")
        (False, None, "Amount must be >= 0")
    """
    if amount is None or isinstance(amount, bool):
        return False, None, "Amount is empty"

    if isinstance(amount, Decimal):
        value = amount
    else:
        raw = str(amount).strip().replace(",", ".")
        if not raw:
            return False, None, "Amount is empty"
        try:
            value = Decimal(raw)
        except InvalidOperation:
            return False, None, "Invalid amount format"

    if not value.is_finite():
        return False, None, "Amount must be a finite number"

    if value < min_val:
        return False, None, f"Amount must be >= {min_val}"

    if max_val is not None and value > max_val:
        return False, None, f"Amount must be <= {max_val}"

    # 8 decimal places max (MoneyType)
    if value.as_tuple().exponent < -8:
        return False, None, "Amount has too many decimal places (maximum 8)"

    return True, value, None


def validate_email(email: str) -> tuple[bool, str | None]:
    """
    Minimal email validator.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not email or not isinstance(email, str):
        return False, "Email is empty"

    email = email.strip()

    if len(email) > 255:
        return False, "Email is too long (maximum 255 characters)"

    parts = email.split("@")
    if len(parts) != 2:
        return False, "Email must contain exactly one '@'"

    local, domain = parts
    if not local or not domain or "." not in domain:
        return False, "Invalid email format"

    return True, None

