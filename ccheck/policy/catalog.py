"""
Rule Catalog Builder.

ALIGNED TO: the policy-engine seam in ccheck/engine/base.py

BUILD ORDER:
    1. Discover   directory -> every entry ending in .rego (sorted)
                  file      -> that file alone, whatever its suffix
    2. Parse      one module per file; first failure aborts, naming the file
    3. Compile    ALL modules in one batch so cross-module references
                  resolve; failure reports every compiler diagnostic

There is no partially usable rule-set: build() either returns a
compiled RuleSet or raises.
"""

import os
from typing import List, Optional, Tuple

import structlog

from ccheck.core.exceptions import CatalogNotBuiltError, PolicySourceError
from ccheck.engine.base import PolicyEngine, PolicyModule, RuleSet

logger = structlog.get_logger()

POLICY_FILE_SUFFIX = ".rego"


class RuleCatalog:
    """Compiled rule-set for one policy source, built once per run."""

    def __init__(self, policy_path: str, engine: PolicyEngine):
        self.policy_path = policy_path
        self.engine = engine
        self._rule_set: Optional[RuleSet] = None

    @property
    def rule_set(self) -> RuleSet:
        if self._rule_set is None:
            raise CatalogNotBuiltError("rule catalog has not been built; call build() first")
        return self._rule_set

    def build(self) -> RuleSet:
        """
        Discover, parse and compile every policy file.

        Raises:
            PolicySourceError   path missing or unreadable
            PolicyParseError    a file failed to parse
            PolicyCompileError  the batch failed to compile
        """
        files = self.discover()
        modules = [self._parse(name, path) for name, path in files]
        logger.info(
            "policy_modules_parsed",
            policy_path=self.policy_path,
            modules=len(modules),
        )
        if not modules:
            logger.warning("no_policy_files_found", policy_path=self.policy_path)

        rule_set = self.engine.compile(modules)
        logger.info(
            "policy_rule_set_compiled",
            modules=len(modules),
            namespaces=rule_set.namespaces,
            digest=rule_set.digest[:16],
        )
        self._rule_set = rule_set
        return rule_set

    def discover(self) -> List[Tuple[str, str]]:
        """Return (module name, file path) pairs for every candidate file."""
        path = self.policy_path
        if not os.path.exists(path):
            raise PolicySourceError(f"error loading policies from {path}: no such file or directory")

        if not os.path.isdir(path):
            return [(os.path.basename(path), path)]

        try:
            entries = sorted(os.listdir(path))
        except OSError as e:
            raise PolicySourceError(f"error loading policies from {path}: {e}") from e

        return [
            (entry, os.path.join(path, entry))
            for entry in entries
            if entry.endswith(POLICY_FILE_SUFFIX)
            and os.path.isfile(os.path.join(path, entry))
        ]

    def _parse(self, name: str, path: str) -> PolicyModule:
        try:
            with open(path, "r", encoding="utf-8") as f:
                source = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise PolicySourceError(f"unable to read policy file {path}: {e}") from e
        return self.engine.parse_module(name, source)


def build_rule_set(policy_path: str, engine: PolicyEngine) -> RuleSet:
    """Shortcut for RuleCatalog(policy_path, engine).build()."""
    return RuleCatalog(policy_path, engine).build()
