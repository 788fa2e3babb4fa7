"""
Ensembles of model responses.

Turns responses gathered from several models into a superposition of
candidates, combines such superpositions, and reweights them by a verifier
before the final measurement.  The model calls and the verification
heuristics themselves are supplied by the caller.
"""

from openquantum.ensemble.candidates import (
    Candidate,
    ModelResponse,
    clamp_unit,
    ensemble,
    superpose_responses,
)
from openquantum.ensemble.verification import measure_with_verification, reweight, verify

__all__ = [
    "Candidate",
    "ModelResponse",
    "superpose_responses",
    "ensemble",
    "reweight",
    "verify",
    "measure_with_verification",
    "clamp_unit",
]
