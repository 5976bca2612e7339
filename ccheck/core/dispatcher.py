"""
ccheck/core/dispatcher.py

Query Dispatcher.

For every document part (source order) and every classified predicate
(denials, then warnings, in classifier order) build

    data.<namespace>.<rule>

and evaluate it with the part bound as `input`. Each pair produces one
PredicateOutcome. Engine failures become EvaluationFailure for that
pair only; cancellation is checked before every evaluation and always
propagates.

Message extraction:
    each result binding -> each expression value
        non-empty list  -> one message per element (must be str)
        anything else   -> no messages
"""

import re
import threading
from typing import Any, List, Sequence

import structlog

from ccheck.core.exceptions import EvaluationError
from ccheck.core.models import (
    EvaluationFailure,
    Messages,
    PredicateClass,
    PredicateOutcome,
)
from ccheck.engine.base import PolicyEngine, ResultBinding, RuleSet
from ccheck.policy.classifier import Classification
from ccheck.runtime.context import CheckContext

logger = structlog.get_logger()

_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def build_query(namespace: str, rule_name: str) -> str:
    """Fully qualified reference to a rule. Raises EvaluationError if malformed."""
    segments = namespace.split(".") if namespace else []
    if not segments or not all(_IDENT_RE.match(s) for s in segments):
        raise EvaluationError(f"error constructing query: invalid namespace {namespace!r}")
    if not _IDENT_RE.match(rule_name or ""):
        raise EvaluationError(f"error constructing query: invalid rule name {rule_name!r}")
    return f"data.{namespace}.{rule_name}"


def extract_messages(bindings: Sequence[ResultBinding]) -> List[str]:
    """Pull violation messages out of evaluation results."""
    messages: List[str] = []
    for binding in bindings:
        for value in binding:
            if not isinstance(value, list) or not value:
                continue
            for element in value:
                if not isinstance(element, str):
                    raise EvaluationError(
                        f"rule produced a non-string message: {element!r} "
                        f"({type(element).__name__})"
                    )
                messages.append(element)
    return messages


class Dispatcher:
    """Evaluates classified predicates against document parts."""

    def __init__(
        self,
        engine: PolicyEngine,
        rule_set: RuleSet,
        namespace: str,
        classification: Classification,
    ):
        self.engine = engine
        self.rule_set = rule_set
        self.namespace = namespace
        self.classification = classification
        self._count = 0
        self._count_lock = threading.Lock()

    @property
    def evaluation_count(self) -> int:
        """Engine calls made so far across all dispatch() calls."""
        return self._count

    def dispatch(self, parts: Sequence[Any], context: CheckContext = None) -> List[PredicateOutcome]:
        """Evaluate every predicate against every part. Raises CheckCancelled."""
        context = context or CheckContext.background()
        predicates = self.classification.ordered()
        outcomes: List[PredicateOutcome] = []
        for index, part in enumerate(parts):
            for predicate_class, rule_name in predicates:
                context.raise_if_cancelled()
                outcomes.append(self._evaluate(index, part, predicate_class, rule_name))
        return outcomes

    def _evaluate(
        self,
        index: int,
        part: Any,
        predicate_class: PredicateClass,
        rule_name: str,
    ) -> PredicateOutcome:
        query = f"data.{self.namespace}.{rule_name}"
        try:
            query = build_query(self.namespace, rule_name)
            with self._count_lock:
                self._count += 1
            bindings = self.engine.evaluate(self.rule_set, query, part)
            messages = extract_messages(bindings)
        except EvaluationError as e:
            logger.warning("predicate_evaluation_failed", query=query, part=index, error=str(e))
            return EvaluationFailure(
                query=query,
                predicate_class=predicate_class,
                part_index=index,
                error=str(e),
            )

        return Messages(
            query=query,
            predicate_class=predicate_class,
            part_index=index,
            messages=tuple(messages),
        )
