"""
ccheck/engine/opa.py

PolicyEngine backed by the Open Policy Agent `opa` executable.

    parse     opa parse --format json <file>
    compile   opa check --format json <bundle dir>
    evaluate  opa eval  --format json --stdin-input --data <bundle dir> <query>

Modules are materialised into a private bundle directory at compile
time; that directory is the compiled rule-set handle and is only read
afterwards, so concurrent evaluate() calls are safe. Temporary paths
are mapped back to module names in every message shown to the user.
"""

import json
import os
import shutil
import subprocess
import tempfile
from typing import Any, Dict, List, Optional, Sequence

import structlog

from ccheck.core.canonical import sources_digest
from ccheck.core.exceptions import (
    EngineUnavailableError,
    EvaluationError,
    PolicyCompileError,
    PolicyParseError,
)
from ccheck.engine.base import (
    Diagnostic,
    PolicyEngine,
    PolicyModule,
    ResultBinding,
    RuleSet,
)

logger = structlog.get_logger()


class OpaEngine(PolicyEngine):
    """
    Drive `opa` as a subprocess.

    Usage:
        with OpaEngine() as engine:
            module   = engine.parse_module("k8s.rego", source)
            rule_set = engine.compile([module])
            engine.evaluate(rule_set, "data.main.deny", {"kind": "Pod"})
    """

    def __init__(self, opa_path: str = "opa", v0_compatible: bool = False):
        self.opa_path      = opa_path
        self.v0_compatible = v0_compatible
        self._scratch: Optional[str] = None

    # ── PolicyEngine ──────────────────────────────────────────

    def parse_module(self, name: str, source: str) -> PolicyModule:
        parse_dir = tempfile.mkdtemp(prefix="parse-", dir=self._scratch_dir())
        path = os.path.join(parse_dir, _bundle_file_name(name))
        with open(path, "w", encoding="utf-8") as f:
            f.write(source)

        try:
            proc = self._run(["parse", "--format", "json", path])
        finally:
            shutil.rmtree(parse_dir, ignore_errors=True)

        if proc.returncode != 0:
            reason = _output_text(proc).replace(path, name)
            raise PolicyParseError(name, reason)

        try:
            ast = json.loads(proc.stdout)
        except ValueError as e:
            raise PolicyParseError(name, f"unreadable parser output: {e}") from e

        return PolicyModule(
            name=name,
            source=source,
            package=_package_name(ast),
            rule_names=tuple(_rule_names(ast)),
        )

    def compile(self, modules: Sequence[PolicyModule]) -> RuleSet:
        bundle = tempfile.mkdtemp(prefix="bundle-", dir=self._scratch_dir())
        names: Dict[str, str] = {}
        for index, module in enumerate(modules):
            path = os.path.join(bundle, f"{index:04d}_{_bundle_file_name(module.name)}")
            with open(path, "w", encoding="utf-8") as f:
                f.write(module.source)
            names[path] = module.name

        proc = self._run(["check", "--format", "json", bundle])
        if proc.returncode != 0:
            shutil.rmtree(bundle, ignore_errors=True)
            raise PolicyCompileError(_diagnostics(proc, names))

        logger.debug("opa_bundle_compiled", modules=len(modules), bundle=bundle)
        return RuleSet(
            modules=tuple(modules),
            digest=sources_digest({m.name: m.source for m in modules}),
            handle=bundle,
        )

    def evaluate(self, rule_set: RuleSet, query: str, input_value: Any) -> List[ResultBinding]:
        try:
            payload = json.dumps(input_value)
        except (TypeError, ValueError) as e:
            raise EvaluationError(f"input is not JSON-serialisable: {e}") from e

        proc = self._run(
            ["eval", "--format", "json", "--stdin-input", "--data", rule_set.handle, query],
            stdin=payload,
        )

        try:
            out = json.loads(proc.stdout) if proc.stdout.strip() else {}
        except ValueError:
            out = None

        if out is None or proc.returncode != 0 or out.get("errors"):
            errors = (out or {}).get("errors") or []
            if errors:
                reason = "; ".join(e.get("message", str(e)) for e in errors)
            else:
                reason = _output_text(proc)
            raise EvaluationError(f"error evaluating rules: {reason}")

        return [
            [expr.get("value") for expr in result.get("expressions", [])]
            for result in out.get("result", [])
        ]

    def close(self) -> None:
        if self._scratch is not None:
            shutil.rmtree(self._scratch, ignore_errors=True)
            self._scratch = None

    # ── Internals ─────────────────────────────────────────────

    def _scratch_dir(self) -> str:
        if self._scratch is None:
            self._scratch = tempfile.mkdtemp(prefix="ccheck-")
        return self._scratch

    def _run(self, args: List[str], stdin: Optional[str] = None) -> subprocess.CompletedProcess:
        cmd = [self.opa_path, args[0]]
        if self.v0_compatible:
            cmd.append("--v0-compatible")
        cmd.extend(args[1:])
        try:
            return subprocess.run(
                cmd,
                input=stdin,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            raise EngineUnavailableError(
                f"unable to run policy engine {self.opa_path!r}: {e}",
                {"hint": "install opa or pass --opa PATH"},
            ) from e


# ─────────────────────────────────────────────────────────────
# AST / output helpers
# ─────────────────────────────────────────────────────────────

def _bundle_file_name(name: str) -> str:
    # opa only loads .rego files from a directory
    base = os.path.basename(name)
    return base if base.endswith(".rego") else base + ".rego"


def _package_name(ast: dict) -> str:
    # path[0] is always the `data` root
    path = ast.get("package", {}).get("path", [])
    return ".".join(str(term.get("value")) for term in path[1:])


def _rule_names(ast: dict) -> List[str]:
    names = []
    for rule in ast.get("rules") or []:
        head = rule.get("head", {})
        name = head.get("name")
        if not name and head.get("ref"):
            name = head["ref"][0].get("value")
        if name:
            names.append(str(name))
    return names


def _output_text(proc: subprocess.CompletedProcess) -> str:
    text = (proc.stderr or "").strip() or (proc.stdout or "").strip()
    return text or f"exit status {proc.returncode}"


def _diagnostics(proc: subprocess.CompletedProcess, names: Dict[str, str]) -> List[Diagnostic]:
    """Turn `opa check --format json` output into Diagnostics."""
    report = None
    for stream in (proc.stdout, proc.stderr):
        if stream and stream.strip():
            try:
                report = json.loads(stream)
                break
            except ValueError:
                continue

    if not isinstance(report, dict) or not report.get("errors"):
        text = _output_text(proc)
        for path, name in names.items():
            text = text.replace(path, name)
        return [Diagnostic(message=text)]

    diagnostics = []
    for err in report["errors"]:
        location = err.get("location") or {}
        file = location.get("file")
        diagnostics.append(Diagnostic(
            message=err.get("message", ""),
            code=err.get("code", ""),
            file=names.get(file, file),
            row=location.get("row"),
            col=location.get("col"),
        ))
    return diagnostics
