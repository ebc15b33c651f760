from decimal import Context, Decimal, Inexact, InvalidOperation

from eth_utils import keccak

from realty_deploy.constants import ETHER_DECIMALS, UINT256_MAX
from realty_deploy.exceptions import InvalidAmountFormat

# any rounding while scaling means the amount is not representable
_CONTEXT = Context(prec=100, traps=[InvalidOperation, Inexact])


def derive_amount(amount: str, decimals: int = ETHER_DECIMALS) -> int:
    """
    Scales a human readable decimal amount (e.g. "0.01") to its integer
    amount in base units (10**decimals), without binary floating point.
    """
    if not isinstance(amount, str):
        raise InvalidAmountFormat(
            f"Amount must be given as a decimal string, got {type(amount).__name__} {amount!r}"
        )
    try:
        value = Decimal(amount.strip(), context=_CONTEXT)
    except InvalidOperation:
        raise InvalidAmountFormat(f"'{amount}' is not a valid decimal amount")

    if not value.is_finite():
        raise InvalidAmountFormat(f"'{amount}' is not a finite amount")
    if value.is_signed():
        raise InvalidAmountFormat(f"'{amount}' is negative")

    try:
        scaled = value.scaleb(decimals, context=_CONTEXT).to_integral_exact(context=_CONTEXT)
    except Inexact:
        raise InvalidAmountFormat(f"'{amount}' has more than {decimals} fractional digits")

    result = int(scaled)
    if result > UINT256_MAX:
        raise InvalidAmountFormat(f"'{amount}' does not fit in a uint256")
    return result


def format_amount(value: int, decimals: int = ETHER_DECIMALS) -> str:
    """Returns the canonical decimal string of an amount in base units."""
    whole, fraction = divmod(value, 10**decimals)
    fraction_digits = str(fraction).rjust(decimals, "0").rstrip("0")
    if not fraction_digits:
        return str(whole)
    return f"{whole}.{fraction_digits}"


def terms_hash(text: str) -> bytes:
    """keccak256 digest of the UTF-8 encoding of text."""
    return keccak(text=text)
