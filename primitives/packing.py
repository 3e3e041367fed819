"""Fixed-precision ("packed") token amounts.

Amounts committed in public data are stored as a decimal float:

    value = mantissa * 10^exponent

with a fixed number of mantissa and exponent bits. Token amounts use a 35-bit
mantissa and 5-bit exponent (40 bits, 5 bytes); fees use an 11-bit mantissa
and 5-bit exponent (16 bits, 2 bytes).

The canonical encoding uses the smallest exponent whose mantissa fits, so
10000 packs as fee (1000, 1) and as amount (10000, 0). Other splits of the
same value are valid decimals but never produced, and the signed message
only accepts the canonical one.

Packing never rounds: a value that is not exactly representable raises
`UnpackableAmount`. The `closest_packable_*` helpers round down explicitly for
callers that want a representable value.

This module is the single implementation of the packing rule. The signature
input builder, the witness generator and the plasma applier all go through it.
"""

from dataclasses import dataclass

import numpy as np

from primitives.field import to_bits_le

# --- Constants ---

EXPONENT_BASE = 10

AMOUNT_EXPONENT_BIT_WIDTH = 5
AMOUNT_MANTISSA_BIT_WIDTH = 35
FEE_EXPONENT_BIT_WIDTH = 5
FEE_MANTISSA_BIT_WIDTH = 11


class UnpackableAmount(ValueError):
    """Raised when an amount or fee has no exact packed representation."""

    def __init__(self, value: int, kind: str = "amount"):
        self.value = value
        self.kind = kind
        super().__init__(f"{kind} {value} is not exactly representable in packed form")


# --- Data Classes ---


@dataclass(frozen=True)
class PackedAmount:
    """Decimal float `mantissa * 10^exponent` with fixed bit widths."""

    mantissa: int
    exponent: int
    mantissa_bits: int
    exponent_bits: int

    @property
    def value(self) -> int:
        return self.mantissa * EXPONENT_BASE ** self.exponent

    @property
    def bit_width(self) -> int:
        return self.mantissa_bits + self.exponent_bits

    def to_int(self) -> int:
        """Packed integer: mantissa in the high bits, exponent in the low bits."""
        return (self.mantissa << self.exponent_bits) | self.exponent

    def to_bytes(self) -> bytes:
        """Big-endian encoding, exactly `bit_width / 8` bytes."""
        return self.to_int().to_bytes(self.bit_width // 8, "big")

    def to_bits(self) -> np.ndarray:
        """Little-endian bit vector of the packed integer."""
        return to_bits_le(self.to_int(), self.bit_width)


# --- Packing ---


def _pack(value: int, mantissa_bits: int, exponent_bits: int, kind: str) -> PackedAmount:
    if value < 0:
        raise UnpackableAmount(value, kind)
    max_mantissa = (1 << mantissa_bits) - 1
    max_exponent = (1 << exponent_bits) - 1

    mantissa = value
    exponent = 0
    while mantissa > max_mantissa:
        mantissa //= EXPONENT_BASE
        exponent += 1

    if exponent > max_exponent:
        raise UnpackableAmount(value, kind)

    packed = PackedAmount(mantissa, exponent, mantissa_bits, exponent_bits)
    if packed.value != value:
        raise UnpackableAmount(value, kind)
    return packed


def pack_amount(value: int) -> PackedAmount:
    """Pack a token amount. Raises UnpackableAmount if not exact."""
    return _pack(value, AMOUNT_MANTISSA_BIT_WIDTH, AMOUNT_EXPONENT_BIT_WIDTH, "amount")


def pack_fee(value: int) -> PackedAmount:
    """Pack a fee. Raises UnpackableAmount if not exact."""
    return _pack(value, FEE_MANTISSA_BIT_WIDTH, FEE_EXPONENT_BIT_WIDTH, "fee")


def unpack(packed_int: int, mantissa_bits: int, exponent_bits: int) -> int:
    """Decode a packed integer produced by `PackedAmount.to_int`."""
    exponent = packed_int & ((1 << exponent_bits) - 1)
    mantissa = packed_int >> exponent_bits
    if mantissa >> mantissa_bits:
        raise ValueError(f"Packed value {packed_int:#x} has too many mantissa bits")
    return mantissa * EXPONENT_BASE ** exponent


def is_amount_packable(value: int) -> bool:
    try:
        pack_amount(value)
    except UnpackableAmount:
        return False
    return True


def is_fee_packable(value: int) -> bool:
    try:
        pack_fee(value)
    except UnpackableAmount:
        return False
    return True


def _closest(value: int, mantissa_bits: int, exponent_bits: int) -> int:
    max_mantissa = (1 << mantissa_bits) - 1
    max_exponent = (1 << exponent_bits) - 1
    mantissa, exponent = value, 0
    while mantissa > max_mantissa and exponent < max_exponent:
        mantissa //= EXPONENT_BASE
        exponent += 1
    mantissa = min(mantissa, max_mantissa)
    return mantissa * EXPONENT_BASE ** exponent


def closest_packable_amount(value: int) -> int:
    """Largest packable token amount not greater than `value`."""
    return _closest(value, AMOUNT_MANTISSA_BIT_WIDTH, AMOUNT_EXPONENT_BIT_WIDTH)


def closest_packable_fee(value: int) -> int:
    """Largest packable fee not greater than `value`."""
    return _closest(value, FEE_MANTISSA_BIT_WIDTH, FEE_EXPONENT_BIT_WIDTH)
