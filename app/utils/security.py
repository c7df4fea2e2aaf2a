"""
Log redaction helpers.

Addresses, hashes, emails and API credentials never reach the logs in
full.
"""


def _keep_ends(value: str | None, head: int, tail: int) -> str:
    if not value or len(value) <= head + tail:
        return "***"
    return f"{value[:head]}...{value[-tail:]}"


def mask_address(address: str | None) -> str:
    """
    Wallet address as 0x1234...5678.

    Examples:
        >>> mask_address("0x1234567890abcdef1234567890abcdef12345678")
        '0x1234...5678'
        >>> mask_address(None)
        '***'
    """
    return _keep_ends(address, 6, 4)


def mask_tx_hash(tx_hash: str | None) -> str:
    """
    Transaction hash as 0x12345678...abcdef.

    Examples:
        >>> mask_tx_hash("0x" + "ab" * 32)
        '0xabababab...ababab'
    """
    return _keep_ends(tx_hash, 10, 6)


def mask_secret(value: str | None, show_chars: int = 4) -> str:
    """
    API key or secret, first and last few characters only.

    Examples:
        >>> mask_secret("my_secret_key_1234567890")
        'my_s...7890'
        >>> mask_secret("short")
        '***'
    """
    return _keep_ends(value, show_chars, show_chars)


def mask_email(email: str | None) -> str:
    """
    Email with the local part hidden: a***@example.com.

    Examples:
        >>> mask_email("alice@example.com")
        'a***@example.com'
    """
    if not email or "@" not in email:
        return "***"
    local, _, domain = email.partition("@")
    return f"{local[:1]}***@{domain}"
