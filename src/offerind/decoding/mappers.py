"""Field mappers: convert decoded ABI values into normalized offer fields.

Every normalized field has exactly one mapper. Mappers reject unexpected
input types with `DecodeError` instead of coercing them.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from eth_utils import is_address, to_checksum_address

from offerind.core.errors import DecodeError
from offerind.core.models import OfferStatus

Mapper = Callable[[Any], Any]


def _hex_or_bytes(value: Any) -> bytes | None:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str) and value.startswith("0x"):
        try:
            return bytes.fromhex(value[2:])
        except ValueError as e:
            raise DecodeError(f"invalid hex value: {value!r}") from e
    return None


def text(value: Any) -> str:
    if isinstance(value, str):
        return value
    raise DecodeError(f"Unexpected type: {type(value).__name__}; expecting string from blockchain")


def decimal_text(value: Any) -> str:
    """uint256 amounts as base-10 strings (never float)."""
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, str) and value.isdigit():
        return value
    raise DecodeError(f"Unexpected type: {type(value).__name__}; expecting integer amount from blockchain")


def _decode_bytes(value: Any, encoding: str) -> str:
    raw = _hex_or_bytes(value)
    if raw is None:
        return text(value)
    try:
        return raw.rstrip(b"\x00").decode(encoding)
    except UnicodeDecodeError as e:
        raise DecodeError(f"value is not valid {encoding}: {value!r}") from e


def utf8(value: Any) -> str:
    return _decode_bytes(value, "utf-8")


def ascii_text(value: Any) -> str:
    return _decode_bytes(value, "ascii")


def address(value: Any) -> str:
    if isinstance(value, str) and is_address(value):
        return to_checksum_address(value)
    raise DecodeError(f"Unexpected value: {value!r}; expecting address from blockchain")


def status(value: Any) -> OfferStatus:
    if isinstance(value, int) and not isinstance(value, bool):
        return status(str(value))
    if isinstance(value, str):
        for member in OfferStatus:
            if value in (member.name, member.value):
                return member
        raise DecodeError(f"Unexpected OfferStatus value: {value}")
    raise DecodeError(
        f"Unexpected type: {type(value).__name__}; expecting string or number from blockchain"
    )


MAPPERS: dict[str, Mapper] = {
    "offer": address,
    "seller": address,
    "buyer": address,
    "title": text,
    "price": decimal_text,
    "category": utf8,
    "ships_from": ascii_text,
    "attached_files": ascii_text,
    "status": status,
}


def map_field(name: str, value: Any) -> Any:
    """Apply the mapper registered for `name` (identity for unknown names)."""
    mapper = MAPPERS.get(name)
    return value if mapper is None else mapper(value)
