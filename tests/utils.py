"""Test infrastructure for operation witnesses.

Provides deterministic signing accounts, a genesis helper that builds the
same state twice (plain PlasmaState and circuit AccountTree), and the three
standard scenario drivers every operation test goes through:

- generic_test_scenario: valid op, cross-checked against PlasmaState
- corrupted_input_test_scenario: corrupted signature data must be rejected
- incorrect_op_test_scenario: structurally invalid op must fail a given gate
"""

import hashlib
from typing import Callable, Collection, List, Optional, Sequence, Tuple

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from constraints import ConstraintName, ValidationResult, evaluate
from models.account import Account
from models.account_tree import AccountTree
from models.params import ADDRESS_WIDTH, FEE_ACCOUNT_ID
from models.tx import TimeRange, TxSignature, WithdrawOp, WithdrawTx
from plasma.state import CollectedFee, PlasmaState
from witness import SigDataInput, WithdrawWitness, generate, pub_key_hash

ApplyOp = Callable[[PlasmaState, WithdrawOp], List[CollectedFee]]


class SigningAccount:
    """Key pair and address of an L2 account, able to sign withdrawals.

    Keys are derived from `seed` so runs are reproducible.
    """

    def __init__(self, account_id: int, seed: Optional[bytes] = None):
        seed = seed if seed is not None else f"account-{account_id}".encode()
        self.account_id = account_id
        self.private_key = Ed25519PrivateKey.from_private_bytes(hashlib.sha256(seed).digest())
        self.pub_key = self.private_key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
        self.pub_key_hash = pub_key_hash(self.pub_key)
        self.address = hashlib.sha256(b"address" + seed).digest()[:ADDRESS_WIDTH]
        self.nonce = 0

    def sign_withdraw(
        self,
        token: int,
        amount: int,
        fee: int,
        to: bytes,
        nonce: Optional[int] = None,
        time_range: Optional[TimeRange] = None,
    ) -> WithdrawTx:
        tx = WithdrawTx(
            account_id=self.account_id,
            from_address=self.address,
            to_address=to,
            token=token,
            amount=amount,
            fee=fee,
            nonce=self.nonce if nonce is None else nonce,
            time_range=time_range,
        )
        signature = self.private_key.sign(tx.message())
        return tx.with_signature(TxSignature(pub_key=self.pub_key, signature=signature))


class WitnessTestAccount:
    """Account placed in the genesis state, with its signing keys."""

    def __init__(
        self,
        account_id: int,
        balance: int,
        token: int = 0,
        signer: Optional[SigningAccount] = None,
    ):
        self.id = account_id
        self.signer = signer if signer is not None else SigningAccount(account_id)
        self.account = Account(
            address=self.signer.address,
            pub_key_hash=self.signer.pub_key_hash,
            nonce=0,
            balances={token: balance} if balance else {},
        )


def genesis_state(
    accounts: Sequence[WitnessTestAccount], fee_account_id: int = FEE_ACCOUNT_ID
) -> Tuple[PlasmaState, AccountTree]:
    """Build matching plain and circuit states with an empty fee account."""
    entries = [(fee_account_id, Account())]
    entries += [(a.id, a.account) for a in accounts]
    plasma_state = PlasmaState(entries)
    tree = AccountTree.from_accounts(entries)
    assert plasma_state.root_hash() == tree.root_hash()
    return plasma_state, tree


def withdraw_op(
    account: WitnessTestAccount,
    amount: int,
    fee: int,
    token: int = 0,
    to: bytes = bytes(ADDRESS_WIDTH),
    account_id: Optional[int] = None,
) -> WithdrawOp:
    """Sign a withdraw with `account` and place it at `account_id` (default: own slot)."""
    tx = account.signer.sign_withdraw(token, amount, fee, to)
    return WithdrawOp(tx=tx, account_id=account.id if account_id is None else account_id)


def generic_test_scenario(
    accounts: Sequence[WitnessTestAccount],
    op: WithdrawOp,
    sig_input: SigDataInput,
    apply_op: ApplyOp,
) -> WithdrawWitness:
    """Valid operation: witness satisfies every gate and matches PlasmaState."""
    plasma_state, tree = genesis_state(accounts)
    root_before = tree.root_hash()

    fees = apply_op(plasma_state, op)
    plasma_state.collect_fee(fees, FEE_ACCOUNT_ID)
    expected_root = plasma_state.root_hash()

    witness = generate(tree, op, sig_input, FEE_ACCOUNT_ID)
    result = evaluate(witness, expected_root)

    assert result.satisfied, f"unexpected violation: {result.first_violated}"
    assert tree.root_hash() == root_before, "snapshot was mutated"
    assert witness.root_before == root_before
    assert witness.root_after == expected_root

    from_account = plasma_state.get_account(op.account_id)
    assert witness.from_after.balance == from_account.get_balance(op.tx.token)
    assert witness.from_after.nonce == from_account.nonce

    collected = sum(f.amount for f in fees if f.token == op.tx.token)
    assert witness.fee_after.balance - witness.fee_before.balance == collected
    return witness


def corrupted_input_test_scenario(
    accounts: Sequence[WitnessTestAccount],
    op: WithdrawOp,
    sig_input: SigDataInput,
    expected_gates: Collection[ConstraintName],
    apply_op: ApplyOp,
) -> ValidationResult:
    """Corrupted signature data: rejected at one of `expected_gates`."""
    plasma_state, tree = genesis_state(accounts)
    fees = apply_op(plasma_state, op)
    plasma_state.collect_fee(fees, FEE_ACCOUNT_ID)

    witness = generate(tree, op, sig_input, FEE_ACCOUNT_ID)
    result = evaluate(witness, plasma_state.root_hash())

    assert not result.satisfied, "corrupted input was accepted"
    assert result.first_violated in expected_gates, (
        f"violated {result.first_violated}, expected one of {sorted(expected_gates)}"
    )
    return result


def incorrect_op_test_scenario(
    accounts: Sequence[WitnessTestAccount],
    op: WithdrawOp,
    sig_input: SigDataInput,
    expected_gate: ConstraintName,
    collected_fees: Callable[[], List[CollectedFee]],
) -> ValidationResult:
    """Invalid operation: fails `expected_gate` without touching PlasmaState."""
    _, tree = genesis_state(accounts)

    witness = generate(tree, op, sig_input, FEE_ACCOUNT_ID)
    result = evaluate(witness)

    assert not result.satisfied, "invalid operation was accepted"
    assert result.first_violated == expected_gate, (
        f"violated {result.first_violated}, expected {expected_gate}"
    )

    expected_fee = sum(f.amount for f in collected_fees() if f.token == op.tx.token)
    assert witness.fee_after.balance - witness.fee_before.balance == expected_fee
    return result
