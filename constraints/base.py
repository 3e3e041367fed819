"""Base classes for constraint evaluation.

A ConstraintModule replicates an operation circuit's validity predicate on a
witness. The circuit enforces every gate at once; here the gates run in a
fixed order and the first failure is reported, which gives a stable,
human-readable diagnosis. Both agree on the all-satisfied case.

A violated gate is a normal result, not an error:

    result = module.evaluate(witness)
    if not result.satisfied:
        print(result.first_violated)   # e.g. ConstraintName.NONCE_MATCHES
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)


class ConstraintName(str, Enum):
    """Stable gate identifiers, in evaluation order."""
    SIGNATURE_VALID = "signature_valid"
    ACCOUNT_ID_MATCHES = "account_id_matches"
    NONCE_MATCHES = "nonce_matches"
    BALANCE_SUFFICIENT = "balance_sufficient"
    MERKLE_CONSISTENCY = "merkle_consistency"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of evaluating a witness.

    Attributes:
        satisfied: True if every gate holds
        first_violated: First failing gate, None when satisfied
    """
    satisfied: bool
    first_violated: Optional[ConstraintName] = None

    @classmethod
    def ok(cls) -> 'ValidationResult':
        return cls(satisfied=True)

    @classmethod
    def violated(cls, gate: ConstraintName) -> 'ValidationResult':
        return cls(satisfied=False, first_violated=gate)

    def __bool__(self) -> bool:
        return self.satisfied


Gate = Tuple[ConstraintName, Callable[[], bool]]


class ConstraintModule(ABC):
    """Per-operation constraint evaluation.

    Subclasses list their gates in order; `evaluate` runs them and stops at
    the first one that does not hold. Gates must be pure and must not raise.
    """

    @abstractmethod
    def gates(self, witness: Any, expected_root_after: Optional[int] = None) -> List[Gate]:
        """Ordered (name, predicate) pairs for `witness`.

        Args:
            witness: Witness produced by the matching WitnessModule
            expected_root_after: Post-operation root from an independent
                state applier, or None to check internal consistency only

        Returns:
            Gates in evaluation order; predicates are evaluated lazily
        """
        pass

    def evaluate(self, witness: Any, expected_root_after: Optional[int] = None) -> ValidationResult:
        """Run the gates in order and report the first violation."""
        for name, predicate in self.gates(witness, expected_root_after):
            if not predicate():
                logger.debug("%s: gate %s violated", type(self).__name__, name)
                return ValidationResult.violated(name)
        return ValidationResult.ok()
