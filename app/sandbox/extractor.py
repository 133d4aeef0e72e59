import re

_IDENT = r"([A-Za-z_$][\w$]*)"

# Priority order; the first match wins
_PATTERNS = (
    re.compile(rf"export\s+default\s+function\s+{_IDENT}"),
    # "default function X" without export: tolerated generator defect
    re.compile(rf"^[ \t]*default\s+function\s+{_IDENT}", re.MULTILINE),
    re.compile(rf"^[ \t]*export\s+default\s+{_IDENT}[ \t]*;?[ \t]*$", re.MULTILINE),
    re.compile(rf"\bfunction\s+{_IDENT}\s*\("),
    re.compile(rf"^(?:export\s+)?(?:const|let|var)\s+{_IDENT}\s*=", re.MULTILINE),
)

_RESERVED = frozenset(("function", "class", "async"))


def extract_component_name(code):
    """Return the identifier of the component to mount, or None if not found."""
    if not code:
        return None
    for pattern in _PATTERNS:
        for match in pattern.finditer(code):
            name = match.group(1)
            if name not in _RESERVED:
                return name
    return None
