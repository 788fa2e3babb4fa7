"""Control flow over superpositions: branching and iteration."""

from openquantum.control.conditionals import quantum_if, quantum_switch
from openquantum.control.loops import LoopResult, quantum_for, quantum_while
from openquantum.control.merge import as_superposition, merge_branches

__all__ = [
    "quantum_if",
    "quantum_switch",
    "quantum_for",
    "quantum_while",
    "LoopResult",
    "merge_branches",
    "as_superposition",
]
