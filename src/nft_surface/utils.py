from decimal import Decimal
from typing import Optional

from nft_surface.constants import ETHER


def short_address(address: Optional[str], chars: int = 4) -> str:
    """
    Shorten an address for display, e.g. ``0xab12…cd34``.

    Args:
        address: Hex address, may be None
        chars: Number of hex characters kept on each side

    Returns:
        Lower-cased shortened address, empty string for a missing address
    """
    if not address:
        return ""
    address = address.lower()
    if len(address) <= 2 + chars * 2:
        return address
    return f"{address[:chars + 2]}…{address[-chars:]}"


def format_ether(wei: int) -> str:
    value = Decimal(int(wei)) / Decimal(ETHER)
    text = format(value.normalize(), "f")
    return text


def parse_ether(value: str) -> int:
    return int(Decimal(str(value).strip()) * ETHER)
