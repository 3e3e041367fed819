"""Rollup circuit parameters.

Bit widths and tree shapes shared by the account tree, the plasma applier,
the witness generator and the constraint evaluator.
"""

from dataclasses import dataclass

from primitives.packing import (
    AMOUNT_EXPONENT_BIT_WIDTH,
    AMOUNT_MANTISSA_BIT_WIDTH,
    FEE_EXPONENT_BIT_WIDTH,
    FEE_MANTISSA_BIT_WIDTH,
)

# --- Widths ---

ACCOUNT_ID_BIT_WIDTH = 24
TOKEN_BIT_WIDTH = 16
BALANCE_BIT_WIDTH = 128
NONCE_BIT_WIDTH = 32
TIMESTAMP_BIT_WIDTH = 64

ADDRESS_WIDTH = 20
PUBKEY_HASH_WIDTH = 20

PACKED_AMOUNT_BYTES = (AMOUNT_EXPONENT_BIT_WIDTH + AMOUNT_MANTISSA_BIT_WIDTH) // 8
PACKED_FEE_BYTES = (FEE_EXPONENT_BIT_WIDTH + FEE_MANTISSA_BIT_WIDTH) // 8

MAX_BALANCE = (1 << BALANCE_BIT_WIDTH) - 1

# --- Operations ---

WITHDRAW_TX_TYPE = 3
CHUNK_BYTES = 9
WITHDRAW_CHUNKS = 4

FEE_ACCOUNT_ID = 0


# --- Configuration ---


@dataclass(frozen=True)
class TreeConfig:
    """Account tree shape.

    Attributes:
        account_tree_depth: Depth of the account tree (account id bit width)
        balance_tree_depth: Depth of each account's balance tree (token bit width)
    """

    account_tree_depth: int
    balance_tree_depth: int

    @property
    def max_account_id(self) -> int:
        return (1 << self.account_tree_depth) - 1

    @property
    def max_token_id(self) -> int:
        return (1 << self.balance_tree_depth) - 1

    @classmethod
    def default(cls) -> 'TreeConfig':
        return cls(
            account_tree_depth=ACCOUNT_ID_BIT_WIDTH,
            balance_tree_depth=TOKEN_BIT_WIDTH,
        )
