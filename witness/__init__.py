"""Witness generation modules.

Each rollup operation type has its own WitnessModule that reads the affected
branches of the account tree and records every intermediate value the circuit
needs, in readable Python code. The WITNESS_REGISTRY maps operation names to
their modules.
"""

from models.account_tree import UnknownAccount
from primitives.packing import UnpackableAmount

from .base import OperationBranch, WitnessModule
from .utils import SigDataInput, pub_key_hash, verify_signature
from .withdraw import WithdrawWitness, WithdrawWitnessGenerator, generate

# Registry mapping operation names to witness module classes
WITNESS_REGISTRY: dict[str, type[WitnessModule]] = {
    'Withdraw': WithdrawWitnessGenerator,
}


def get_witness_module(op_name: str, **kwargs) -> WitnessModule:
    """Get witness module instance for an operation type.

    Args:
        op_name: Name of the operation (e.g., 'Withdraw')
        **kwargs: Forwarded to the module constructor (e.g., fee_account_id)

    Returns:
        WitnessModule instance for the operation

    Raises:
        KeyError: If no witness module is registered for the operation
    """
    if op_name in WITNESS_REGISTRY:
        return WITNESS_REGISTRY[op_name](**kwargs)
    raise KeyError(f"No witness module for operation '{op_name}'. "
                   f"Available: {list(WITNESS_REGISTRY.keys())}")


__all__ = [
    'WitnessModule',
    'OperationBranch',
    'SigDataInput',
    'WithdrawWitness',
    'WithdrawWitnessGenerator',
    'UnknownAccount',
    'UnpackableAmount',
    'WITNESS_REGISTRY',
    'generate',
    'get_witness_module',
    'pub_key_hash',
    'verify_signature',
]
