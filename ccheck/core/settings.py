"""
ccheck: run configuration.

CheckerConfig carries every knob a run needs. It is built from the
environment by from_env() and then overridden by CLI options.

Environment:
    CCHECK_POLICY_DIR   policy file or directory           (default: policies)
    CCHECK_NAMESPACE    rule namespace                     (default: main)
    CCHECK_STRICT       "1"/"true" promotes warnings       (default: off)
    CCHECK_OPA_PATH     path to the opa executable         (default: opa)
    CCHECK_REGO_V0      "1"/"true" accepts Rego v0 syntax  (default: off)
"""

import os
from dataclasses import dataclass, replace
from typing import Optional

DEFAULT_POLICY_DIR = "policies"
DEFAULT_NAMESPACE  = "main"
DEFAULT_OPA_PATH   = "opa"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class CheckerConfig:
    policy_path:   str  = DEFAULT_POLICY_DIR
    namespace:     str  = DEFAULT_NAMESPACE
    strict:        bool = False
    fail_fast:     bool = False
    parallel:      bool = False
    max_workers:   Optional[int] = None
    opa_path:      str  = DEFAULT_OPA_PATH
    v0_compatible: bool = False

    @classmethod
    def from_env(cls) -> "CheckerConfig":
        """Read CCHECK_* env vars. Unset variables keep the defaults."""
        env = os.environ
        return cls(
            policy_path=env.get("CCHECK_POLICY_DIR", DEFAULT_POLICY_DIR),
            namespace=env.get("CCHECK_NAMESPACE", DEFAULT_NAMESPACE),
            strict=env.get("CCHECK_STRICT", "").strip().lower() in _TRUTHY,
            opa_path=env.get("CCHECK_OPA_PATH", DEFAULT_OPA_PATH),
            v0_compatible=env.get("CCHECK_REGO_V0", "").strip().lower() in _TRUTHY,
        )

    def with_overrides(self, **overrides) -> "CheckerConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)
