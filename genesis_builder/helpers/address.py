"""SS58 address encoding for legacy ChainX account keys.

Raw account keys in the snapshot are 32-byte public keys written as
``0x``-prefixed hex. Display addresses are their SS58 form under the ChainX
network prefix.
"""

from functools import lru_cache

from scalecodec.utils.ss58 import ss58_decode, ss58_encode

from genesis_builder.helpers.constants import PUBLIC_KEY_LENGTH, SS58_PREFIX
from genesis_builder.helpers.exceptions import IntegrityError


def parse_public_key(pubkey: str) -> bytes:
    """Parse a ``0x``-prefixed hex public key.

    Args:
        pubkey: Hex encoded 32-byte public key

    Returns:
        The raw key bytes

    Raises:
        IntegrityError: If the key is not 32 bytes of valid hex
    """
    hex_key = pubkey[2:] if pubkey.startswith(("0x", "0X")) else pubkey
    try:
        key = bytes.fromhex(hex_key)
    except ValueError as e:
        msg = f"Invalid public key {pubkey!r}: {e}"
        raise IntegrityError(msg) from e
    if len(key) != PUBLIC_KEY_LENGTH:
        msg = f"Invalid public key {pubkey!r}: expected {PUBLIC_KEY_LENGTH} bytes, got {len(key)}"
        raise IntegrityError(msg)
    return key


@lru_cache(maxsize=None)
def encode_address(pubkey: str, prefix: int = SS58_PREFIX) -> str:
    """Encode a raw public key as an SS58 address.

    Args:
        pubkey: Hex encoded 32-byte public key (``0x`` prefix optional)
        prefix: SS58 network identifier

    Returns:
        The SS58 address

    Raises:
        IntegrityError: If the key is not 32 bytes of valid hex
        ValueError: If the prefix is not a valid SS58 format

    Example:
        ```python
        from genesis_builder.helpers.address import encode_address

        who = encode_address("0x67df26a755e0c31ac81e2ed530d147d7f2b9a3f5a570619048c562b1ed00dfdd")
        ```
    """
    return ss58_encode(parse_public_key(pubkey), ss58_format=prefix)


@lru_cache(maxsize=None)
def decode_address(address: str, prefix: int = SS58_PREFIX) -> str:
    """Decode an SS58 address back to its ``0x``-prefixed hex public key.

    Raises:
        IntegrityError: If the address is malformed, uses another network
            prefix, fails its checksum or does not hold a 32-byte key
    """
    if address.startswith("0x"):
        msg = f"Invalid address {address!r}: expected SS58, got hex"
        raise IntegrityError(msg)
    try:
        decoded = ss58_decode(address, valid_ss58_format=prefix)
    except ValueError as e:
        msg = f"Invalid address {address!r}: {e}"
        raise IntegrityError(msg) from e

    return "0x" + parse_public_key(decoded).hex()


__all__ = ["decode_address", "encode_address", "parse_public_key"]
