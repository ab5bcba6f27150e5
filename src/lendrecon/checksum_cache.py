import functools

from cchecksum import to_checksum_address
from eth_typing import ChecksumAddress, HexAddress


@functools.lru_cache(maxsize=4096)
def get_checksum_address(address: HexAddress | str | bytes) -> ChecksumAddress:
    return to_checksum_address(address)


def normalize_address(address: str) -> str:
    """
    Lower-case representation used as the lookup key for stored addresses.
    """

    return address.strip().lower()
