"""
ccheck policy engines.

PolicyEngine is the abstract seam; OpaEngine drives the `opa` binary.
"""

from ccheck.engine.base import (
    Diagnostic,
    PolicyEngine,
    PolicyModule,
    ResultBinding,
    RuleSet,
)
from ccheck.engine.opa import OpaEngine

__all__ = [
    "Diagnostic",
    "PolicyEngine",
    "PolicyModule",
    "ResultBinding",
    "RuleSet",
    "OpaEngine",
]
