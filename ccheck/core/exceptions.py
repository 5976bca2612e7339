"""
ccheck Exception Hierarchy

All exceptions inherit from CcheckError for easy catching.

Scope of each family:
    ConfigurationError  fatal to the whole run (bad policy path, no engine)
    PolicyError         fatal to the whole run (parse / compile failures)
    DocumentError       fatal to one input file
    EvaluationError     scoped to one (document part, predicate) pair
    CheckCancelled      aborts the run, never folded into a result
"""

from typing import List


class CcheckError(Exception):
    """Base exception for all ccheck errors"""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


# ── Configuration ─────────────────────────────────────────────

class ConfigurationError(CcheckError):
    """Raised when the run cannot be configured"""
    pass


class PolicySourceError(ConfigurationError):
    """Raised when the policy path is missing or unreadable"""
    pass


class EngineUnavailableError(ConfigurationError):
    """Raised when the policy engine cannot be started"""
    pass


# ── Policy authoring ──────────────────────────────────────────

class PolicyError(CcheckError):
    """Raised when policy definitions cannot be loaded"""
    pass


class PolicyParseError(PolicyError):
    """Raised when a single policy file fails to parse"""

    def __init__(self, file: str, reason: str):
        super().__init__(f"unable to parse policy file {file}: {reason}")
        self.file = file
        self.reason = reason


class PolicyCompileError(PolicyError):
    """
    Raised when the batch compilation of all policy modules fails.

    Carries every diagnostic reported by the compiler, not just the first.
    """

    def __init__(self, diagnostics: List):
        self.diagnostics = list(diagnostics)
        count = len(self.diagnostics)
        lines = "\n".join(f"  {d}" for d in self.diagnostics)
        super().__init__(f"{count} error(s) occurred while compiling policies:\n{lines}")

    def __str__(self):
        return self.message


class CatalogNotBuiltError(PolicyError):
    """Raised when the rule-set is requested before build()"""
    pass


# ── Input documents ───────────────────────────────────────────

class DocumentError(CcheckError):
    """Raised when an input file cannot be turned into document parts"""
    kind = "document"

    def __init__(self, path: str, message: str):
        super().__init__(message)
        self.path = path


class FileAccessError(DocumentError):
    """Raised when an input file cannot be opened or read"""
    kind = "file_access"

    def __init__(self, path: str, reason: str):
        super().__init__(path, f"unable to open file {path}: {reason}")


class UnsupportedFormatError(DocumentError):
    """Raised when no decoder is registered for a file extension"""
    kind = "unsupported_format"

    def __init__(self, path: str, extension: str):
        shown = extension or "<none>"
        super().__init__(path, f"unsupported format {shown!r} for file: {path}")
        self.extension = extension


class DocumentParseError(DocumentError):
    """Raised when one document part cannot be decoded"""
    kind = "parse"

    def __init__(self, path: str, part_index: int, reason: str):
        super().__init__(
            path, f"unable to parse document {part_index} of {path}: {reason}"
        )
        self.part_index = part_index
        self.reason = reason


# ── Evaluation ────────────────────────────────────────────────

class EvaluationError(CcheckError):
    """Raised when the engine cannot evaluate a query"""
    pass


class CheckCancelled(CcheckError):
    """Raised when the caller cancels a run before it completes"""
    pass


class CheckError(CcheckError):
    """Raised when a fail-fast run stops on a file-scoped error"""
    pass
