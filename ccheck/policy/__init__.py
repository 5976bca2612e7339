"""
ccheck policy layer.

Components:
- RuleCatalog: discovers, parses and batch-compiles policy files
- classify: sorts rule names into denial and warning predicates
"""

from ccheck.policy.catalog import RuleCatalog, build_rule_set, POLICY_FILE_SUFFIX
from ccheck.policy.classifier import (
    Classification,
    DENY_PATTERN,
    WARN_PATTERN,
    classify,
    classify_rule_set,
)

__all__ = [
    "RuleCatalog",
    "build_rule_set",
    "POLICY_FILE_SUFFIX",
    "Classification",
    "DENY_PATTERN",
    "WARN_PATTERN",
    "classify",
    "classify_rule_set",
]
