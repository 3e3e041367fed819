"""BN254 scalar field GF(p) and fixed-width bit decomposition.

Uses galois library for all field arithmetic. FF is the field type the
circuit works over; balances, nonces and hashes all live in it.

Bit decomposition mirrors the circuit's `into_bits_le_fixed` gadget: a value
is split into exactly `n_bits` little-endian bits, and the decomposition is
only valid when packing those bits back gives the original value.
"""

import galois
import numpy as np

# --- Field Construction ---

BN254_PRIME = 21888242871839275222246405745257275088548364400416034343698204186575808495617

# 5 generates the multiplicative group. Passing it skips the factorisation of
# p - 1 that galois would otherwise run at import time.
FF = galois.GF(BN254_PRIME, primitive_element=5, verify=False)
"""Base field GF(p) - BN254 scalar field (Fr)."""

FIELD_BYTES = 32


def fe(value: int) -> FF:
    """Construct a field element from a (possibly negative) integer."""
    return FF(value % BN254_PRIME)


def fe_to_int(elem: FF) -> int:
    """Extract the canonical integer representative in [0, p)."""
    return int(elem)


def fe_to_bytes(value: int) -> bytes:
    """Big-endian 32-byte encoding of a field element given as int."""
    return (value % BN254_PRIME).to_bytes(FIELD_BYTES, "big")


# --- Bit Decomposition ---


def to_bits_le(value: int, n_bits: int) -> np.ndarray:
    """Decompose `value` into its lowest `n_bits` bits, little-endian.

    Higher bits are dropped, the same way a fixed-width witness allocation
    would ignore them. Use `fits_bits` to check that nothing was dropped.
    """
    if value < 0:
        raise ValueError(f"Cannot decompose negative value {value}")
    n_bytes = max((value.bit_length() + 7) // 8, (n_bits + 7) // 8, 1)
    raw = np.frombuffer(value.to_bytes(n_bytes, "little"), dtype=np.uint8)
    return np.unpackbits(raw, bitorder="little")[:n_bits]


def from_bits_le(bits: np.ndarray) -> int:
    """Recompose an integer from a little-endian bit vector."""
    if len(bits) == 0:
        return 0
    packed = np.packbits(np.asarray(bits, dtype=np.uint8), bitorder="little")
    return int.from_bytes(packed.tobytes(), "little")


def fits_bits(value: int, n_bits: int) -> bool:
    """True if `value` round-trips through an `n_bits` decomposition."""
    return from_bits_le(to_bits_le(value, n_bits)) == value
