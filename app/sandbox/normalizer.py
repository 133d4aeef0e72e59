"""Best-effort textual repair of generated component source.

This is regex rewriting, not parsing. Every rule is anchored so that ordinary
JavaScript/JSX (no imports, annotations or interface/type blocks) passes
through unchanged, and running the normalizer on its own output is a no-op.
"""
import re

PRIMITIVE_TYPES = frozenset(
    ("string", "number", "boolean", "any", "void", "unknown", "never", "object")
)

_IDENT = r"[A-Za-z_$][\w$]*"
# Foo, Foo.Bar, Foo<Bar>, Foo[], Foo | null
_TYPE_ATOM = r"[A-Za-z_$][\w$.]*(?:<[^()\n;=]*?>)?(?:\[\])*"
_TYPE = rf"{_TYPE_ATOM}(?:\s*[|&]\s*{_TYPE_ATOM})*"

_IMPORT_RE = re.compile(
    r"^[ \t]*import\s+(?:[\w$*{}\s,]+?\s+from\s+)?['\"][^'\"\n]+['\"][ \t]*;?[ \t]*(?:\n|$)",
    re.MULTILINE,
)
_LEADING_BLANK_RE = re.compile(r"^\s*\n+")

_TYPE_BLOCK_RE = re.compile(
    r"^([ \t]*(?:export\s+)?(?:interface|type)\s+\w+(?:<[^>\n]*>)?\s*=?\s*)(\{[^{}]*\})",
    re.MULTILINE,
)
_FIELD_RE = re.compile(r"(\w+\??\s*:\s*[^;\n,{}]+)(\n)")
_TYPE_ALIAS_RE = re.compile(r"^([ \t]*(?:export\s+)?type\s+\w+[ \t]*=[ \t]*[^;\n{]+)(\n)", re.MULTILINE)

_SEMI_BEFORE_BRACE_RE = re.compile(r";[ \t]*\{")
_DUPLICATE_SEMI_RE = re.compile(r";(?:[ \t]*;)+(?=[ \t]*(?:$|\}))", re.MULTILINE)
_COMMA_SEMI_RE = re.compile(r",\s*;")

_PARAM_LIST_RE = re.compile(r"\(([^()\n]*)\)")
# Leading access modifiers stay in the prefix; strip_access_modifiers drops them
_PARAM_RE = re.compile(
    r"^(\s*(?:(?:public|private|protected|readonly)\s+)*)"
    rf"({_IDENT}|\{{[^{{}}]*\}}|\[[^\[\]]*\])\??\s*:\s*({_TYPE})(\s*=\s*[^=].*)?(\s*)$",
    re.DOTALL,
)
_ARROW_PARAM_RE = re.compile(
    rf"\b({_IDENT})\s*:\s*([A-Z][\w$.]*(?:<[^()\n;=]*?>)?(?:\[\])*)\s*=>"
)
_VARIABLE_RE = re.compile(
    rf"\b((?:const|let|var)\s+(?:{_IDENT}|\{{[^{{}}]*\}}|\[[^\[\]]*\]))\s*:\s*({_TYPE})(\s*=)(?![=>])"
)
_RETURN_TYPE_RE = re.compile(rf"\)\s*:\s*({_TYPE})(\s*)(?=\{{|=>)")
_MODIFIER_RE = re.compile(
    r"(^[ \t]*|[(,][ \t]*)(?:public|private|protected|readonly)\s+"
    r"(?=[A-Za-z_$#][\w$]*\s*[?!]?\s*[:=;(),])",
    re.MULTILINE,
)


def looks_like_type(annotation):
    """True for capitalized identifiers and primitive type keywords.

    Ternaries share ``:`` with annotations; a lowercase non-primitive on the
    right-hand side is left alone.
    """
    head = re.match(r"[A-Za-z_$][\w$]*", annotation.strip())
    if not head:
        return False
    word = head.group(0)
    return word[0].isupper() or word in PRIMITIVE_TYPES


def strip_imports(code):
    cleaned, count = _IMPORT_RE.subn("", code)
    if count:
        cleaned = _LEADING_BLANK_RE.sub("", cleaned, count=1)
    return cleaned


def _terminate_field(match):
    field, newline = match.group(1), match.group(2)
    trimmed = field.strip()
    if trimmed.endswith((";", ",")):
        return match.group(0)
    if re.search(r"[{}\[\]()]$", trimmed) or re.search(r"[=><]$", trimmed):
        return match.group(0)
    return f"{field};{newline}"


def _fix_type_block(match):
    head, body = match.group(1), match.group(2)
    return head + _FIELD_RE.sub(_terminate_field, body)


def _terminate_alias(match):
    alias, newline = match.group(1), match.group(2)
    if alias.rstrip().endswith(";"):
        return match.group(0)
    return f"{alias.rstrip()};{newline}"


def add_type_block_terminators(code):
    code = _TYPE_BLOCK_RE.sub(_fix_type_block, code)
    return _TYPE_ALIAS_RE.sub(_terminate_alias, code)


def collapse_terminators(code):
    code = _SEMI_BEFORE_BRACE_RE.sub(" {", code)
    code = _DUPLICATE_SEMI_RE.sub(";", code)
    return _COMMA_SEMI_RE.sub(",", code)


def _split_params(params):
    """Split on top-level commas (ignores commas nested in {} [] <>)."""
    parts, depth, current = [], 0, []
    for char in params:
        if char in "{[<":
            depth += 1
        elif char in "}]>":
            depth = max(depth - 1, 0)
        if char == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return parts


def _strip_param_list(match):
    params = match.group(1)
    if ":" not in params:
        return match.group(0)

    stripped = []
    changed = False
    for part in _split_params(params):
        if ":" not in part:
            stripped.append(part)
            continue
        param = _PARAM_RE.match(part)
        if not param or not looks_like_type(param.group(3)):
            # Object literal, ternary or string: leave the whole list alone
            return match.group(0)
        lead, name, _, default, trail = param.groups()
        stripped.append(f"{lead}{name}{default or ''}{trail}")
        changed = True
    if not changed:
        return match.group(0)
    return "(" + ",".join(stripped) + ")"


def _preceding_char(text, index):
    before = text[:index].rstrip()
    return before[-1:] if before else ""


def _opening_paren(text, close_index):
    depth = 0
    for index in range(close_index, -1, -1):
        if text[index] == ")":
            depth += 1
        elif text[index] == "(":
            depth -= 1
            if depth == 0:
                return index
    return -1


def _strip_arrow_param(match):
    # Only after "=", "(" or "return"; object keys and ternary branches share the shape
    before = match.string[:match.start()].rstrip()
    if before and not before.endswith(("=", "(", "return")):
        return match.group(0)
    return f"{match.group(1)} =>"


def _strip_variable(match):
    if not looks_like_type(match.group(2)):
        return match.group(0)
    return match.group(1) + match.group(3)


def _strip_return_type(match):
    if not looks_like_type(match.group(1)):
        return match.group(0)
    # cond ? (a) : B is a ternary branch, not a return type
    opening = _opening_paren(match.string, match.start())
    if opening >= 0 and _preceding_char(match.string, opening) in ("?", ":"):
        return match.group(0)
    return ")" + (match.group(2) or " ")


def strip_type_annotations(code):
    code = _PARAM_LIST_RE.sub(_strip_param_list, code)
    code = _ARROW_PARAM_RE.sub(_strip_arrow_param, code)
    code = _VARIABLE_RE.sub(_strip_variable, code)
    return _RETURN_TYPE_RE.sub(_strip_return_type, code)


def strip_access_modifiers(code):
    return _MODIFIER_RE.sub(r"\1", code)


def normalize_code(code):
    """Prepare generated source for the transpiler.

    Rules run in a fixed order; they are not commutative.
    """
    normalized = strip_imports(code)
    normalized = add_type_block_terminators(normalized)
    normalized = collapse_terminators(normalized)
    normalized = strip_type_annotations(normalized)
    return strip_access_modifiers(normalized)


_EXPORT_DEFAULT_RE = re.compile(r"export\s+default\s+")
_EXPORT_RE = re.compile(r"^([ \t]*)export\s+", re.MULTILINE)
_BARE_DEFAULT_RE = re.compile(r"^([ \t]*)default\s+(?=function\b)", re.MULTILINE)


def strip_exports(code):
    """Drop ``export``/``default`` keywords so declarations become plain ones.

    ``default function X`` (a known generator defect) is handled too. A
    trailing ``export default X;`` becomes a bare ``X;`` expression.
    """
    code = _EXPORT_DEFAULT_RE.sub("", code)
    code = _EXPORT_RE.sub(r"\1", code)
    return _BARE_DEFAULT_RE.sub(r"\1", code)
