"""
ccheck/core/checker.py

ConfChecker: runs every classified predicate over every input file.

RUN ORDER (an error at step 1 aborts before any input is read):
    1. Build     RuleCatalog -> compiled RuleSet
    2. Classify  rule names  -> (denials, warnings), once per run
    3. Check     per file: load -> dispatch -> aggregate

File-scoped errors (unreadable file, unsupported extension, decode
failure) become that file's CheckResult; other files still run.
With fail_fast the first such error aborts the whole run instead.

parallel=True checks files on a thread pool. Each file's message
order is unaffected; the report is keyed by path either way.
"""

import os
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional

import structlog

from ccheck.core.aggregator import aggregate, collect
from ccheck.core.exceptions import CheckError, DocumentError
from ccheck.core.loader import load_document
from ccheck.core.models import CheckResult, CheckResults
from ccheck.core.settings import CheckerConfig
from ccheck.core.dispatcher import Dispatcher
from ccheck.engine.base import PolicyEngine, RuleSet
from ccheck.policy.catalog import RuleCatalog
from ccheck.policy.classifier import Classification, classify_rule_set
from ccheck.runtime.context import CheckContext

logger = structlog.get_logger()


class ConfChecker:
    """
    Checks config files against the policies under config.policy_path.

    Usage:
        with OpaEngine() as engine:
            checker = ConfChecker(CheckerConfig(policy_path="policies"), engine)
            results = checker.run(["deploy.yaml"])
    """

    def __init__(self, config: CheckerConfig, engine: Optional[PolicyEngine] = None):
        self.config = config
        self._owns_engine = engine is None
        if engine is None:
            from ccheck.engine.opa import OpaEngine
            engine = OpaEngine(config.opa_path, config.v0_compatible)
        self.engine = engine
        self.catalog = RuleCatalog(config.policy_path, engine)
        self.classification: Optional[Classification] = None
        self.dispatcher: Optional[Dispatcher] = None

    def close(self) -> None:
        """Close the engine if this checker created it."""
        if self._owns_engine:
            self.engine.close()

    def __enter__(self) -> "ConfChecker":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def rule_set(self) -> RuleSet:
        return self.catalog.rule_set

    def prepare(self) -> Dispatcher:
        """Build and classify the rule-set. Idempotent."""
        if self.dispatcher is None:
            rule_set = self.catalog.build()
            self.classification = classify_rule_set(rule_set)
            logger.info(
                "predicates_classified",
                denials=list(self.classification.denials),
                warnings=list(self.classification.warnings),
            )
            self.dispatcher = Dispatcher(
                self.engine, rule_set, self.config.namespace, self.classification
            )
        return self.dispatcher

    def run(self, paths: Iterable[str], context: Optional[CheckContext] = None) -> CheckResults:
        """
        Check every path.

        Raises:
            ConfigurationError, PolicyError  before any file is read
            CheckCancelled                   the context was cancelled
            CheckError                       fail_fast and a file failed to load
        """
        context = context or CheckContext.background()
        self.prepare()

        # one entry per file, even if a path is given twice
        unique: Dict[str, None] = {}
        for p in paths:
            unique.setdefault(os.path.abspath(p), None)
        files: List[str] = list(unique)

        if self.config.parallel and len(files) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                checked = list(pool.map(lambda f: self.check_file(f, context), files))
        else:
            checked = [self.check_file(f, context) for f in files]

        return collect(dict(zip(files, checked)))

    def check_file(self, path: str, context: Optional[CheckContext] = None) -> CheckResult:
        """Check a single file. File-scoped errors are returned, not raised."""
        context = context or CheckContext.background()
        dispatcher = self.prepare()
        context.raise_if_cancelled()

        try:
            document = load_document(path)
        except DocumentError as e:
            if self.config.fail_fast:
                raise CheckError(f"error processing file: {e}", {"path": e.path}) from e
            logger.warning("file_load_failed", path=e.path, kind=e.kind, error=str(e))
            return CheckResult.from_error(e.kind, str(e))

        outcomes = dispatcher.dispatch(document.parts, context)
        result = aggregate(outcomes, parts=len(document))
        logger.info(
            "file_checked",
            path=document.path,
            parts=len(document),
            failures=len(result.failures),
            warnings=len(result.warnings),
            errors=len(result.errors),
        )
        return result
