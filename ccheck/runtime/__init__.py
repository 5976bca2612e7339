"""
ccheck runtime - cancellation for in-flight checks.
"""

from ccheck.runtime.context import CheckContext

__all__ = [
    "CheckContext",
]
