"""
tests/conftest.py

Shared fixtures.

FakeEngine is an in-memory PolicyEngine: rules are Python callables
keyed by module file name, so dispatch, catalog and checker behaviour
can be tested without the opa binary. A rule returns the value the
query would produce (a list for deny/warn sets) or None for undefined.
"""

import re
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

import pytest

from ccheck.core.canonical import sources_digest
from ccheck.core.exceptions import PolicyCompileError, PolicyParseError
from ccheck.engine.base import Diagnostic, PolicyEngine, PolicyModule, RuleSet

Rule = Callable[[Any], Any]

_PACKAGE_RE = re.compile(r"^\s*package\s+([\w.]+)", re.MULTILINE)


class FakeEngine(PolicyEngine):

    def __init__(
        self,
        rules: Optional[Dict[str, Dict[str, Rule]]] = None,
        compile_errors: Sequence[Diagnostic] = (),
    ):
        self.rules = rules or {}
        self.compile_errors = list(compile_errors)
        self.parsed:   List[str] = []
        self.compiled: List[List[str]] = []
        self.queries:  List[str] = []
        self.inputs:   List[Any] = []
        self.closed = False

    def parse_module(self, name: str, source: str) -> PolicyModule:
        self.parsed.append(name)
        if "syntax error" in source:
            raise PolicyParseError(name, f"{name}:1: rego_parse_error: unexpected token")
        match = _PACKAGE_RE.search(source)
        if match is None:
            raise PolicyParseError(name, "package expected")
        return PolicyModule(
            name=name,
            source=source,
            package=match.group(1),
            rule_names=tuple(self.rules.get(name, {})),
        )

    def compile(self, modules: Sequence[PolicyModule]) -> RuleSet:
        self.compiled.append([m.name for m in modules])
        if self.compile_errors:
            raise PolicyCompileError(self.compile_errors)
        return RuleSet(
            modules=tuple(modules),
            digest=sources_digest({m.name: m.source for m in modules}),
            handle=self,
        )

    def evaluate(self, rule_set: RuleSet, query: str, input_value: Any) -> List[List[Any]]:
        self.queries.append(query)
        self.inputs.append(input_value)
        prefix, rule_name = query.rsplit(".", 1)
        namespace = prefix[len("data."):]
        for module in rule_set.modules:
            if module.package != namespace:
                continue
            rule = self.rules.get(module.name, {}).get(rule_name)
            if rule is None:
                continue
            value = rule(input_value)
            return [] if value is None else [[value]]
        return []

    def close(self) -> None:
        self.closed = True


# ─────────────────────────────────────────────────────────────
# The k8s example policy, expressed as Python rules
# ─────────────────────────────────────────────────────────────

def _is_hpa(doc: Any) -> bool:
    return isinstance(doc, dict) and doc.get("kind") == "HorizontalPodAutoscaler"


def _name(doc: Any) -> str:
    return ((doc or {}).get("metadata") or {}).get("name", "")


def _namespace(doc: Any) -> str:
    return ((doc or {}).get("metadata") or {}).get("namespace", "")


K8S_RULES: Dict[str, Rule] = {
    "is_hpa": lambda d: True if _is_hpa(d) else None,
    "deny_no_hpa": lambda d: [] if _is_hpa(d) else [
        f"{_name(d)} must not include any Horizontal Pod AutoScalers"
    ],
    "warn_no_default_namespace": lambda d: [
        f"{_name(d)} should not be configured to live in the default namespace"
    ] if _namespace(d) == "default" else [],
}

K8S_POLICY = """package main

import rego.v1

is_hpa if input.kind == "HorizontalPodAutoscaler"
"""

DEPLOYMENT = """apiVersion: apps/v1
kind: Deployment
metadata:
  name: nginx
  namespace: web
"""

HPA = """apiVersion: autoscaling/v2
kind: HorizontalPodAutoscaler
metadata:
  name: nginx
  namespace: default
"""


@pytest.fixture
def make_engine():
    """Factory: make_engine(rules=..., compile_errors=...) -> FakeEngine."""
    return FakeEngine


@pytest.fixture
def k8s_rules():
    return dict(K8S_RULES)


@pytest.fixture
def k8s_engine():
    return FakeEngine(rules={"k8s.rego": dict(K8S_RULES)})


@pytest.fixture
def policy_dir(tmp_path: Path) -> Path:
    """A policy directory holding the k8s example module."""
    d = tmp_path / "policies"
    d.mkdir()
    (d / "k8s.rego").write_text(K8S_POLICY)
    return d


@pytest.fixture
def manifest(tmp_path: Path) -> Path:
    """Two-document manifest: a Deployment, then an HPA in `default`."""
    p = tmp_path / "k8s.yaml"
    p.write_text(DEPLOYMENT + "---\n" + HPA)
    return p


@pytest.fixture
def deployment_only(tmp_path: Path) -> Path:
    p = tmp_path / "deployment.yaml"
    p.write_text(DEPLOYMENT)
    return p
