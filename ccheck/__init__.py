"""
ccheck/__init__.py

ccheck: validate structured config files against Rego policies.

    rules named deny / deny_<x>  -> failures
    rules named warn / warn_<x>  -> warnings

Multi-document YAML files are split on `---` lines and every document
is evaluated on its own.

Library code logs through structlog. Call configure_logging() (or
configure structlog yourself) before use; unconfigured structlog
prints every level to stdout.
"""

__version__ = "0.3.0"

from ccheck.core.checker import ConfChecker
from ccheck.core.exceptions import (
    CcheckError,
    CheckCancelled,
    CheckError,
    ConfigurationError,
    DocumentError,
    EvaluationError,
    PolicyCompileError,
    PolicyError,
    PolicyParseError,
)
from ccheck.core.log import configure_logging
from ccheck.core.models import (
    CheckResult,
    CheckResults,
    EvaluationFailure,
    Messages,
    PredicateClass,
)
from ccheck.core.settings import CheckerConfig
from ccheck.engine import OpaEngine, PolicyEngine
from ccheck.runtime import CheckContext

__all__ = [
    # Orchestration
    "ConfChecker",
    "CheckerConfig",
    "CheckContext",
    "configure_logging",
    # Engines
    "PolicyEngine",
    "OpaEngine",
    # Results
    "CheckResult",
    "CheckResults",
    "Messages",
    "EvaluationFailure",
    "PredicateClass",
    # Errors
    "CcheckError",
    "ConfigurationError",
    "PolicyError",
    "PolicyParseError",
    "PolicyCompileError",
    "DocumentError",
    "EvaluationError",
    "CheckCancelled",
    "CheckError",
]
