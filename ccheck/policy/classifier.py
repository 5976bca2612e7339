"""
Predicate Classifier.

Naming is the whole contract between policy authors and ccheck:

    deny, deny_<suffix>   failure check
    warn, warn_<suffix>   warning check
    anything else         helper, never evaluated directly

Both patterns are tested independently, so a name matching both would
land in both buckets. Duplicate names are kept; a clash between two
modules in one namespace surfaces at evaluation, not here.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Tuple

from ccheck.core.models import PredicateClass
from ccheck.engine.base import RuleSet

DENY_PATTERN = re.compile(r"^deny(_\w+)?$")
WARN_PATTERN = re.compile(r"^warn(_\w+)?$")


@dataclass(frozen=True)
class Classification:
    denials:  Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    @property
    def total(self) -> int:
        return len(self.denials) + len(self.warnings)

    def ordered(self) -> Tuple[Tuple[PredicateClass, str], ...]:
        """Every predicate in evaluation order: denials, then warnings."""
        return tuple(
            [(PredicateClass.DENIAL, n) for n in self.denials]
            + [(PredicateClass.WARNING, n) for n in self.warnings]
        )


def classify(rule_names: Iterable[str]) -> Classification:
    """Partition rule names by naming convention, preserving order."""
    denials = []
    warnings = []
    for name in rule_names:
        if DENY_PATTERN.match(name):
            denials.append(name)
        if WARN_PATTERN.match(name):
            warnings.append(name)
    return Classification(denials=tuple(denials), warnings=tuple(warnings))


def classify_rule_set(rule_set: RuleSet) -> Classification:
    """Classify every top-level rule of every module in a compiled rule-set."""
    return classify(rule_set.rule_names)
