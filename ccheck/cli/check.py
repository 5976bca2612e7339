"""
ccheck/cli/check.py

ccheck: validate config files against Rego policies.

Usage:
    ccheck -p policies deploy.yaml svc.yaml      Check two files
    ccheck -p policies -n k8s *.yaml             Rules live in `package k8s`
    ccheck -p policies -s deploy.yaml            Strict: warnings fail the run
    ccheck -p policies --format json deploy.yaml

Exit codes:
    0  every file passed (warnings allowed unless -s)
    1  at least one failure or evaluation error (or warning with -s)
    2  run aborted: bad policy path, policy parse/compile error,
       missing opa binary, --fail-fast file error, cancellation
"""

import sys
from typing import Optional, Tuple

import click

from ccheck.cli.report import (
    EXIT_ABORTED,
    configure_color,
    emit_error,
    exit_code,
    output_human,
    output_json,
)
from ccheck.core.checker import ConfChecker
from ccheck.core.exceptions import CcheckError, PolicyCompileError
from ccheck.core.log import configure_logging
from ccheck.core.settings import CheckerConfig


@click.command(name="ccheck")
@click.version_option(package_name="ccheck")
@click.argument("files", nargs=-1, required=True, type=click.Path())
@click.option(
    "-p", "policy_path",
    default=None,
    metavar="PATH",
    help="Directory (or single file) policy definitions live in. [default: policies]",
)
@click.option(
    "-n", "namespace",
    default=None,
    metavar="NAMESPACE",
    help="Namespace (Rego package) rules live in. [default: main]",
)
@click.option(
    "-s", "strict",
    is_flag=True,
    default=False,
    help="Strict mode: warnings are treated as failures.",
)
@click.option(
    "--format", "fmt",
    type=click.Choice(["human", "json"], case_sensitive=False),
    default="human",
    show_default=True,
    help="Output format.",
)
@click.option(
    "--fail-fast",
    is_flag=True,
    default=False,
    help="Abort the whole run on the first unreadable or undecodable file.",
)
@click.option(
    "--parallel",
    is_flag=True,
    default=False,
    help="Check files concurrently.",
)
@click.option(
    "--opa", "opa_path",
    default=None,
    metavar="PATH",
    help="Path to the opa executable. [default: opa]",
)
@click.option(
    "--v0-compatible",
    is_flag=True,
    default=False,
    help="Accept Rego v0 syntax (opa >= 1.0).",
)
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable ANSI color output.",
)
@click.option("-v", "--verbose", count=True, help="Log progress to stderr (-vv for debug).")
def check_command(
    files:         Tuple[str, ...],
    policy_path:   Optional[str],
    namespace:     Optional[str],
    strict:        bool,
    fmt:           str,
    fail_fast:     bool,
    parallel:      bool,
    opa_path:      Optional[str],
    v0_compatible: bool,
    no_color:      bool,
    verbose:       int,
) -> None:
    """
    A command line utility for validating structured config files.

    FILES are YAML (.yaml, .yml) or JSON (.json) documents. Multi-document
    files are split on `---` lines and every document is checked on its own.

    \b
    Rules named deny / deny_<x> are failures.
    Rules named warn / warn_<x> are warnings.
    """
    configure_logging(verbosity=verbose)
    configure_color(not no_color)

    env = CheckerConfig.from_env()
    config = env.with_overrides(
        policy_path=policy_path,
        namespace=namespace,
        opa_path=opa_path,
        strict=strict or env.strict,
        fail_fast=fail_fast,
        parallel=parallel,
        v0_compatible=v0_compatible or env.v0_compatible,
    )

    try:
        with ConfChecker(config) as checker:
            results = checker.run(files)
            digest  = checker.rule_set.digest
    except PolicyCompileError as e:
        emit_error("error loading rules: " + str(e), fmt)
        sys.exit(EXIT_ABORTED)
    except CcheckError as e:
        emit_error(str(e), fmt)
        sys.exit(EXIT_ABORTED)

    if fmt == "json":
        output_json(results, config.strict, config.namespace, digest)
    else:
        output_human(results, config.strict)

    sys.exit(exit_code(results, config.strict))
