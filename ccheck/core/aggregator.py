"""
ccheck/core/aggregator.py

Result Aggregator.

Folds one file's PredicateOutcomes into a CheckResult:
    Messages / DENIAL   -> failures
    Messages / WARNING  -> warnings
    EvaluationFailure   -> errors
Evaluation order is preserved within each list.
"""

from typing import Iterable, Mapping

from ccheck.core.models import (
    CheckResult,
    CheckResults,
    EvaluationFailure,
    PredicateClass,
    PredicateOutcome,
)


def aggregate(outcomes: Iterable[PredicateOutcome], parts: int = 0) -> CheckResult:
    result = CheckResult(parts=parts)
    for outcome in outcomes:
        if isinstance(outcome, EvaluationFailure):
            result.errors.append(outcome)
        elif outcome.predicate_class is PredicateClass.DENIAL:
            result.failures.extend(outcome.messages)
        else:
            result.warnings.extend(outcome.messages)
    return result


def collect(results: Mapping[str, CheckResult]) -> CheckResults:
    """Build the final report keyed by absolute path."""
    report = CheckResults()
    for path, result in results.items():
        report[path] = result
    return report
