"""
ccheck/core/canonical.py

Rule-set fingerprint.

The policy sources of a compiled rule-set are serialised as RFC 8785
canonical JSON (module name -> source text) and hashed with SHA-256.
Reports carry the digest as `policy_digest`, so two runs can be tied
to the same policies even when the files were discovered in a
different order.
"""

import hashlib
from typing import Mapping

try:
    import jcs
except ImportError as exc:
    raise ImportError(
        "ccheck fingerprints policy rule-sets with RFC 8785 JSON and needs "
        "the 'jcs' package (pip install jcs)."
    ) from exc


def sources_digest(sources: Mapping[str, str]) -> str:
    """Lowercase hex SHA-256 over the canonical {module name: source} map."""
    encoded = jcs.canonicalize(dict(sources))
    return hashlib.sha256(encoded).hexdigest()
