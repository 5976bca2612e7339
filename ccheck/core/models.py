"""
ccheck/core/models.py

Data model shared by the dispatcher, the aggregator and the reporter.

OUTCOME CONTRACT
    Every (document part, predicate) evaluation yields exactly one
    PredicateOutcome:
        Messages           the rule ran; zero or more violation messages
        EvaluationFailure  the engine could not run the rule

    "the policy reports two violations" and "the engine failed" are
    therefore distinguishable without inspecting message text.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple, Union


class PredicateClass(Enum):
    """Severity a rule name is classified into"""
    DENIAL  = "deny"
    WARNING = "warn"


# ─────────────────────────────────────────────────────────────
# Per-predicate outcomes
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Messages:
    """Successful evaluation of one predicate against one document part."""
    query:           str
    predicate_class: PredicateClass
    part_index:      int
    messages:        Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class EvaluationFailure:
    """The engine could not evaluate one predicate against one document part."""
    query:           str
    predicate_class: PredicateClass
    part_index:      int
    error:           str

    @property
    def ok(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"{self.query} (document {self.part_index}): {self.error}"


PredicateOutcome = Union[Messages, EvaluationFailure]


@dataclass(frozen=True)
class FileError:
    """A file-scoped failure: the file never reached evaluation."""
    kind:    str   # "file_access" | "unsupported_format" | "parse"
    message: str

    def __str__(self) -> str:
        return self.message


# ─────────────────────────────────────────────────────────────
# Per-file results
# ─────────────────────────────────────────────────────────────

@dataclass
class CheckResult:
    """
    Outcome for a single input file.

    failures and warnings hold the message strings produced by policy
    evaluation, passed through unmodified, in part-then-predicate order.
    errors holds evaluation failures and file-scoped load errors.
    """
    failures: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    errors:   List[Union[EvaluationFailure, FileError]] = field(default_factory=list)
    parts:    int = 0

    @property
    def passed(self) -> bool:
        return not (self.failures or self.warnings or self.errors)

    def failed(self, strict: bool = False) -> bool:
        """True when this file should make the run exit non-zero."""
        if self.failures or self.errors:
            return True
        return strict and bool(self.warnings)

    @classmethod
    def from_error(cls, kind: str, message: str) -> "CheckResult":
        return cls(errors=[FileError(kind=kind, message=message)])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed":   self.passed,
            "parts":    self.parts,
            "failures": list(self.failures),
            "warnings": list(self.warnings),
            "errors":   [str(e) for e in self.errors],
        }


class CheckResults(Dict[str, CheckResult]):
    """
    Mapping of absolute file path -> CheckResult.

    Consumers must not rely on iteration order; use sorted_items()
    for stable output.
    """

    def sorted_items(self) -> List[Tuple[str, CheckResult]]:
        return sorted(self.items())

    def failed(self, strict: bool = False) -> bool:
        return any(r.failed(strict) for r in self.values())

    def counts(self) -> Dict[str, int]:
        return {
            "files":    len(self),
            "passed":   sum(1 for r in self.values() if r.passed),
            "failures": sum(len(r.failures) for r in self.values()),
            "warnings": sum(len(r.warnings) for r in self.values()),
            "errors":   sum(len(r.errors) for r in self.values()),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {path: result.to_dict() for path, result in self.sorted_items()}
