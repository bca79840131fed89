"""
Standard type definitions for database models.

Provides consistent types for monetary and address fields across all models.
"""

from sqlalchemy import String
from sqlalchemy.types import TypeDecorator


class Amount(TypeDecorator):
    """
    Unsigned 10**18-scaled integer stored as a decimal string.

    DECIMAL/NUMERIC columns lose precision on SQLite past 2**63, so
    amounts are kept as text and converted back to int on load.
    Range: up to 78 digits (uint256).
    """

    impl = String(78)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = int(value)
        if value < 0:
            raise ValueError(f"Amount cannot be negative: {value}")
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)


# Lowercase 0x-prefixed hex address
AddressType = String(42)
