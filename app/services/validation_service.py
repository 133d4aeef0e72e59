"""Structural and security checks applied to generated component code."""
import re
from dataclasses import dataclass
from typing import Optional

_EXPORT_DEFAULT_RE = re.compile(r"export\s+default\s+function\s+\w+")
# Some generator builds drop the "export" keyword
_BARE_DEFAULT_RE = re.compile(r"^default\s+function\s+\w+", re.MULTILINE)
_FUNCTION_RE = re.compile(r"function\s+\w+\s*\(")
_SCRIPT_TAG_RE = re.compile(r"<script", re.IGNORECASE)
_INNER_HTML_RE = re.compile(r"dangerouslySetInnerHTML")


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    reason: Optional[str] = None


def validate_generated_code(code):
    """Return a ValidationResult for ``code``.

    Security rules always apply, whatever else the code contains.
    """
    code = code or ""
    if not (
        _EXPORT_DEFAULT_RE.search(code)
        or _BARE_DEFAULT_RE.search(code)
        or _FUNCTION_RE.search(code)
    ):
        return ValidationResult(False, "Code must include a React component function")

    if _SCRIPT_TAG_RE.search(code):
        return ValidationResult(False, "Script tags are not allowed")

    if _INNER_HTML_RE.search(code):
        return ValidationResult(False, "dangerouslySetInnerHTML is not allowed")

    return ValidationResult(True)
