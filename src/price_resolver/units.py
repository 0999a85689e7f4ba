from __future__ import annotations

WAD = 10**18


def scale_to_18(value: int, decimals: int) -> int:
    """Scale an integer amount to 18 decimals.

    Args:
        value: Integer amount expressed with ``decimals`` decimal places.
        decimals: Current decimal precision of ``value``.

    Returns:
        The amount scaled to 18-decimal precision.

    Notes:
        - If ``decimals`` < 18, multiplies by 10**(18 - decimals).
        - If ``decimals`` > 18, uses integer division (truncates toward zero).
        - Intended for fixed-point on-chain style values.
    """
    if decimals == 18:
        return value
    if decimals < 18:
        return value * (10 ** (18 - decimals))
    return value // (10 ** (decimals - 18))


def scale_from_18(value: int, decimals: int) -> int:
    """Scale an 18-decimal amount down (or up) to ``decimals`` places."""
    if decimals == 18:
        return value
    if decimals < 18:
        return value // (10 ** (18 - decimals))
    return value * (10 ** (decimals - 18))


def mul_wad(a: int, b: int) -> int:
    """Multiply two 18-decimal values, truncating once at the end."""
    return a * b // WAD


def div_wad(a: int, b: int) -> int:
    """Divide two 18-decimal values, scaling the numerator first.

    Raises:
        ZeroDivisionError: If ``b`` is zero.
    """
    return a * WAD // b


def rescale_mantissa(mantissa: int, source_decimals: int, target_decimals: int) -> int:
    """Convert a 1e18 mantissa of raw target units per raw source unit to WAD.

    Lending receipts publish their exchange rate as raw underlying per raw
    receipt token scaled by 1e18 (e.g. Compound's ``exchangeRateStored``).
    The normalized rate is ``mantissa * 10**source_decimals / 10**target_decimals``.
    """
    return mantissa * (10**source_decimals) // (10**target_decimals)
