"""Address validation utilities."""

from eth_utils import is_hex_address


# Zero address - used as "no referral" marker
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def validate_address(address: str) -> tuple[bool, str | None]:
    """
    Validate an account/contract address.

    Args:
        address: Address to validate

    Returns:
        Tuple of (is_valid, error_message)

    Examples:
        >>> validate_address("0x1234567890123456789012345678901234567890")
        (True, None)
        >>> validate_address("invalid")
        (False, 'Address must start with 0x')
    """
    if not address or not isinstance(address, str):
        return False, "Address is empty"

    address = address.strip()

    if not address.startswith("0x"):
        return False, "Address must start with 0x"

    if len(address) != 42:
        return False, "Address must be 42 characters"

    if not is_hex_address(address):
        return False, "Invalid address format"

    return True, None


def normalize_address(address: str) -> str:
    """
    Normalize address to lowercase hex.

    Args:
        address: Address

    Returns:
        Lowercased address

    Raises:
        ValueError: If invalid address
    """
    is_valid, error = validate_address(address)
    if not is_valid:
        raise ValueError(f"Invalid address {address!r}: {error}")
    return address.strip().lower()


def is_zero_address(address: str | None) -> bool:
    """Check for unset/zero address."""
    return not address or address.lower() == ZERO_ADDRESS
