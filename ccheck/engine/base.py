"""
ccheck/engine/base.py

The seam between ccheck and the policy language.

ccheck never interprets policy code itself. A PolicyEngine parses
modules, compiles them as one batch and evaluates fully qualified
queries with a document bound as `input`. Everything ccheck needs to
know about a module (its package and top-level rule names) comes back
from parse_module().
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

# One result row: the values of each expression in the query.
ResultBinding = List[Any]


@dataclass(frozen=True)
class PolicyModule:
    """A parsed, not yet compiled, policy file."""
    name:       str                 # file name the module was read from
    source:     str
    package:    str                 # e.g. "main" for `package main`
    rule_names: Tuple[str, ...]     # top-level rule heads, source order


@dataclass(frozen=True)
class Diagnostic:
    """One compiler message, attributed to a module where possible."""
    message: str
    code:    str = ""
    file:    Optional[str] = None
    row:     Optional[int] = None
    col:     Optional[int] = None

    def __str__(self) -> str:
        where = self.file or "<policies>"
        if self.row is not None:
            where = f"{where}:{self.row}"
            if self.col is not None:
                where = f"{where}:{self.col}"
        code = f"{self.code}: " if self.code else ""
        return f"{where}: {code}{self.message}"


@dataclass(frozen=True)
class RuleSet:
    """
    Compiled, read-only rule-set.

    Produced once per run by PolicyEngine.compile(). `handle` is private
    to the engine that built it.
    """
    modules: Tuple[PolicyModule, ...]
    digest:  str
    handle:  Any = field(default=None, compare=False, repr=False)

    @property
    def namespaces(self) -> List[str]:
        seen: Dict[str, None] = {}
        for module in self.modules:
            seen.setdefault(module.package, None)
        return list(seen)

    @property
    def rule_names(self) -> List[str]:
        return [name for m in self.modules for name in m.rule_names]


class PolicyEngine(ABC):
    """Abstract policy engine. Implementations must be safe for concurrent evaluate()."""

    @abstractmethod
    def parse_module(self, name: str, source: str) -> PolicyModule:
        """Parse one module. Raises PolicyParseError."""

    @abstractmethod
    def compile(self, modules: Sequence[PolicyModule]) -> RuleSet:
        """Compile all modules together. Raises PolicyCompileError."""

    @abstractmethod
    def evaluate(self, rule_set: RuleSet, query: str, input_value: Any) -> List[ResultBinding]:
        """Evaluate `query` with `input_value` as input. Raises EvaluationError."""

    def close(self) -> None:
        """Release engine resources."""

    def __enter__(self) -> "PolicyEngine":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
