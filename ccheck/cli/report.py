"""
ccheck/cli/report.py

Reporter: renders CheckResults and decides the exit status.

Human output, one line each:
    Passed: <path>
    Warning: <path> - <message>     (Failure: in strict mode)
    Failure: <path> - <message>
    Error: <path> - <message>

Message text comes from policy evaluation and is printed unmodified.
Strict mode changes how a warning is shown and counted, never which
list it lives in.
"""

import json
import sys
from typing import Optional

import click

from ccheck.core.models import CheckResults


# ── Outcome styling ───────────────────────────────────────────────────────────

# Report label -> click color. Strict warnings are printed as failures.
_LABEL_COLORS = {
    "Passed":  "green",
    "Warning": "yellow",
    "Failure": "red",
    "Error":   "red",
}


class _Style:
    """Colors report lines by outcome label; plain when piped or --no-color."""
    enabled: bool = True

    @classmethod
    def line(cls, label: str, path: str, message: Optional[str] = None) -> str:
        text = f"{label}: {path}" if message is None else f"{label}: {path} - {message}"
        return cls.paint(text, _LABEL_COLORS[label])

    @classmethod
    def paint(cls, text: str, color: str) -> str:
        return click.style(text, fg=color) if cls.enabled else text


def configure_color(enabled: bool) -> None:
    _Style.enabled = enabled and sys.stdout.isatty()


# ── Exit status ───────────────────────────────────────────────────────────────

EXIT_OK      = 0
EXIT_FAILED  = 1
EXIT_ABORTED = 2


def exit_code(results: CheckResults, strict: bool) -> int:
    return EXIT_FAILED if results.failed(strict) else EXIT_OK


# ── Human output ──────────────────────────────────────────────────────────────

def output_human(results: CheckResults, strict: bool) -> None:
    for path, res in results.sorted_items():
        if res.passed:
            click.echo(_Style.line("Passed", path))
            continue

        for w in res.warnings:
            if strict:
                click.echo(_Style.line("Failure", path, w))
                continue
            click.echo(_Style.line("Warning", path, w))

        for f in res.failures:
            click.echo(_Style.line("Failure", path, f))

        for e in res.errors:
            click.echo(_Style.line("Error", path, e))


# ── JSON output ───────────────────────────────────────────────────────────────

def output_json(
    results:       CheckResults,
    strict:        bool,
    namespace:     str,
    policy_digest: Optional[str],
) -> None:
    out = {
        "ccheck": {
            "namespace":     namespace,
            "strict":        strict,
            "policy_digest": policy_digest,
            "passed":        not results.failed(strict),
            "counts":        results.counts(),
            "files":         results.to_dict(),
        }
    }
    click.echo(json.dumps(out, indent=2))


# ── Error output ──────────────────────────────────────────────────────────────

def emit_error(msg: str, fmt: str) -> None:
    """Emit a run-aborting error in the selected format. Never raises."""
    if fmt == "json":
        click.echo(json.dumps({"ccheck": {"error": msg, "passed": False}}, indent=2))
    else:
        click.echo(_Style.paint(f"error: {msg}", "red"), err=True)
