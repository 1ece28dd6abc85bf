import re
from decimal import Decimal, ROUND_HALF_UP, localcontext

from core.exceptions import InvalidAmountException

_AMOUNT_RE = re.compile(r"^(\d+)(?:\.(\d+))?$")
MAX_UINT256 = 2 ** 256 - 1


def format_units(value: int, decimals: int) -> str:
    """
    Scale a raw integer amount into an exact decimal string.

    Parameters
    ----------
    value : int
        Amount in smallest units
    decimals : int
        Token decimals

    Returns
    -------
    str
        Decimal string without trailing fraction zeros, e.g. ``"1.5"``
    """
    sign = "-" if value < 0 else ""
    whole, fraction = divmod(abs(value), 10 ** decimals)
    if decimals == 0 or fraction == 0:
        return f"{sign}{whole}"
    fraction_str = str(fraction).rjust(decimals, "0").rstrip("0")
    return f"{sign}{whole}.{fraction_str}"


def parse_units(amount: str, decimals: int) -> int:
    """
    Parse a human decimal amount into smallest units.

    Parameters
    ----------
    amount : str
        Non-negative decimal string
    decimals : int
        Token decimals

    Returns
    -------
    int
        Amount in smallest units

    Raises
    ------
    InvalidAmountException
        If the amount is malformed, has more fraction digits than the token
        or does not fit in uint256
    """
    match = _AMOUNT_RE.match(amount.strip())
    if not match:
        raise InvalidAmountException()
    whole, fraction = match.group(1), match.group(2) or ""
    if len(fraction) > decimals:
        raise InvalidAmountException(f"Amount supports at most {decimals} decimal places")
    raw = int(whole) * 10 ** decimals + int(fraction.ljust(decimals, "0") or "0")
    if raw > MAX_UINT256:
        raise InvalidAmountException("Amount does not fit in uint256")
    return raw


def format_display_amount(amount: str, precision: int = 4) -> str:
    """
    Round an exact decimal amount for display.

    Parameters
    ----------
    amount : str
        Exact decimal string
    precision : int
        Fraction digits to keep

    Returns
    -------
    str
        Rounded amount with trailing zeros stripped
    """
    with localcontext() as ctx:
        ctx.prec = len(amount) + precision + 2
        rounded = Decimal(amount).quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_UP)
    text = f"{rounded:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def explorer_tx_link(base_url: str, transaction_hash: str) -> str:
    return f"{base_url}{transaction_hash}"
