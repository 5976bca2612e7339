"""
ccheck: Basic Usage Example

Demonstrates:
- Building a checker over the example policies
- Checking a multi-document manifest
- Reading failures, warnings and evaluation errors
- Cancelling a long run from another thread

Requires the `opa` binary on PATH.
"""

import threading
from pathlib import Path

from ccheck import (
    CheckCancelled,
    CheckContext,
    CheckerConfig,
    ConfChecker,
    configure_logging,
)

HERE = Path(__file__).resolve().parent


def main():
    """Basic ccheck usage."""

    # warnings and errors only, on stderr
    configure_logging()

    print("=" * 60)
    print("ccheck: Basic Usage Example")
    print("=" * 60)
    print()

    config = CheckerConfig(policy_path=str(HERE / "policies"), namespace="main")
    configs = sorted(str(p) for p in (HERE / "configs").iterdir())

    # 1️⃣ Run the checks
    with ConfChecker(config) as checker:
        results = checker.run(configs)

        print(f"Rule-set digest: {checker.rule_set.digest[:16]}...")
        print(f"Denials:  {', '.join(checker.classification.denials) or '-'}")
        print(f"Warnings: {', '.join(checker.classification.warnings) or '-'}")
        print()

        # 2️⃣ Inspect per-file results
        for path, result in results.sorted_items():
            name = Path(path).name
            if result.passed:
                print(f"  ✅ {name}: passed ({result.parts} document(s))")
                continue
            for msg in result.failures:
                print(f"  ❌ {name}: {msg}")
            for msg in result.warnings:
                print(f"  ⚠️  {name}: {msg}")
            for err in result.errors:
                print(f"  💥 {name}: {err}")

        print()
        print(f"Run failed (strict): {results.failed(strict=True)}")

        # 3️⃣ Cancellation: a cancelled context aborts before the next query
        ctx = CheckContext()
        timer = threading.Timer(0.0, ctx.cancel, args=("user requested stop",))
        timer.start()
        timer.join()
        try:
            checker.run(configs, ctx)
        except CheckCancelled as e:
            print(f"Cancelled run: {e}")


if __name__ == "__main__":
    main()
