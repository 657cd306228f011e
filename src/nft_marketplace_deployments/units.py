"""Exact conversion between decimal amounts and integer token units."""

from decimal import Decimal
from typing import Union

from web3 import Web3

from .exceptions import ConfigurationError

Amount = Union[str, Decimal, int]


def parse_units(amount: Amount, unit: str = "ether") -> int:
    """
    Convert a human-readable amount to wei.

    Args:
        amount: Decimal string (e.g., "0.1"), Decimal or int. Floats are rejected
                because they cannot represent most decimal fractions exactly.
        unit: Denomination of ``amount`` as known to web3 ("ether", "gwei", ...)

    Returns:
        Integer amount in wei

    Raises:
        ConfigurationError: If amount is not a finite, non-negative number that
                            converts to a whole number of wei
    """
    if isinstance(amount, (float, bool)):
        raise ConfigurationError(f"Amount must be a decimal string, got {type(amount).__name__}")

    try:
        wei = Web3.to_wei(amount, unit)
        # to_wei truncates sub-wei fractions
        exact = Web3.from_wei(wei, unit) == Decimal(amount)
    except (ValueError, TypeError, ArithmeticError) as e:
        raise ConfigurationError(f"Invalid amount {amount!r} {unit}: {e}") from e

    if not exact:
        raise ConfigurationError(f"Amount {amount!r} {unit} is not a whole number of wei")
    return wei


def parse_ether(amount: Amount) -> int:
    """Convert an ether amount (e.g., "0.1") to wei."""
    return parse_units(amount, "ether")
