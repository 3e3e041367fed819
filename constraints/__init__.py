"""Constraint evaluation modules.

Each rollup operation type has its own ConstraintModule that replicates the
circuit's validity predicate on a witness, gate by gate, in readable Python
code. The CONSTRAINT_REGISTRY maps operation names to their modules.
"""

from .base import (
    ConstraintModule,
    ConstraintName,
    ValidationResult,
)
from .withdraw import WithdrawConstraints, evaluate

# Registry mapping operation names to constraint module classes
CONSTRAINT_REGISTRY: dict[str, type[ConstraintModule]] = {
    "Withdraw": WithdrawConstraints,
}


def get_constraint_module(op_name: str) -> ConstraintModule:
    """Get constraint module instance for an operation type.

    Args:
        op_name: Name of the operation (e.g., 'Withdraw')

    Returns:
        ConstraintModule instance for the operation

    Raises:
        KeyError: If no constraint module is registered for the operation
    """
    if op_name in CONSTRAINT_REGISTRY:
        return CONSTRAINT_REGISTRY[op_name]()
    raise KeyError(
        f"No constraint module for operation '{op_name}'. "
        f"Available: {list(CONSTRAINT_REGISTRY.keys())}"
    )


__all__ = [
    "ConstraintModule",
    "ConstraintName",
    "ValidationResult",
    "WithdrawConstraints",
    "CONSTRAINT_REGISTRY",
    "evaluate",
    "get_constraint_module",
]
