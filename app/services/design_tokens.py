"""Design tokens shared by prompts, stylesheets and previews.

Tokens are loaded once per path and treated as read-only afterwards, so any
number of generations or renders may read them concurrently.
"""
import json
import threading
from types import MappingProxyType
from flask import current_app

CORE_COLORS = ("bg", "fg", "primary", "secondary", "muted", "accent", "destructive", "border")

_cache = {}
_lock = threading.Lock()


def _freeze(value):
    if isinstance(value, dict):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


def load_tokens(path=None):
    """Return the token mapping for ``path`` (defaults to DESIGN_TOKENS_PATH)."""
    if path is None:
        path = current_app.config["DESIGN_TOKENS_PATH"]
    tokens = _cache.get(path)
    if tokens is not None:
        return tokens
    with _lock:
        if path not in _cache:
            with open(path, encoding="utf-8") as fh:
                _cache[path] = _freeze(json.load(fh))
        return _cache[path]


def to_plain(tokens):
    """Convert frozen tokens back into JSON-serialisable dicts."""
    if isinstance(tokens, MappingProxyType):
        return {k: to_plain(v) for k, v in tokens.items()}
    if isinstance(tokens, tuple):
        return [to_plain(v) for v in tokens]
    return tokens


def core_colors(tokens):
    return [(name, tokens["colors"][name]) for name in CORE_COLORS]


def css_variables(tokens):
    """Render the ``:root`` custom properties used by preview documents."""
    lines = [f"  --color-{name}: {value};" for name, value in tokens["colors"].items()]
    lines += [f"  --radius-{name}: {value};" for name, value in tokens["radius"].items()]
    lines += [f"  --spacing-{name}: {value};" for name, value in tokens["spacing"].items()]
    lines += [f"  --font-{name}: {value};" for name, value in tokens["font"].items()]
    return ":root {\n" + "\n".join(lines) + "\n}"


def tailwind_config(tokens):
    """Tailwind CDN config extending the theme with the design tokens."""
    return {
        "theme": {
            "extend": {
                "colors": to_plain(tokens["colors"]),
                "borderRadius": to_plain(tokens["radius"]),
                "spacing": to_plain(tokens["spacing"]),
            }
        }
    }
