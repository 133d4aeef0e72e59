"""Stylesheet generation for design-token utility classes.

Tailwind's CDN build covers standard utilities in the browser; this module
emits the token-backed classes (``bg-primary``, ``rounded-lg`` ...) so a
stored generation renders with the right palette even without the CDN.
"""
import re
from app.services.design_tokens import css_variables

_CLASS_ATTR_RE = re.compile(r"className\s*=\s*(?:\"([^\"]*)\"|'([^']*)'|\{`([^`]*)`\})")
_COMMENT_RE = re.compile(r"/\*[\s\S]*?\*/")

_COLOR_PROPERTIES = {
    "bg": "background-color",
    "text": "color",
    "border": "border-color",
}
_PSEUDO_VARIANTS = {"hover", "focus", "active"}


def used_classes(code):
    classes = set()
    for match in _CLASS_ATTR_RE.finditer(code or ""):
        value = next(group for group in match.groups() if group is not None)
        classes.update(value.split())
    return classes


def _escape(class_name):
    return re.sub(r"([:/.\[\]])", r"\\\1", class_name)


def _declaration(utility, tokens):
    prefix, _, name = utility.partition("-")
    if prefix in _COLOR_PROPERTIES and name in tokens["colors"]:
        return f"{_COLOR_PROPERTIES[prefix]}: {tokens['colors'][name]}"
    if prefix == "rounded" and name in tokens["radius"]:
        return f"border-radius: {tokens['radius'][name]}"
    if prefix == "shadow" and name in tokens.get("shadow", {}):
        return f"box-shadow: {tokens['shadow'][name]}"
    return None


def generate_css(code, tokens):
    """Return minified CSS for every token utility class used in ``code``."""
    rules = []
    for class_name in sorted(used_classes(code)):
        variant, _, utility = class_name.rpartition(":")
        if variant and variant not in _PSEUDO_VARIANTS:
            continue
        declaration = _declaration(utility, tokens)
        if declaration is None:
            continue
        selector = "." + _escape(class_name)
        if variant:
            selector += f":{variant}"
        rules.append(f"{selector} {{ {declaration}; }}")
    return optimize_css("\n".join(rules))


def optimize_css(css):
    """Strip comments and redundant whitespace."""
    optimized = _COMMENT_RE.sub("", css)
    optimized = re.sub(r"\s+", " ", optimized)
    optimized = re.sub(r"\s*([{}:;,])\s*", r"\1", optimized)
    return optimized.strip()


def calculate_css_size(css):
    """Size in KB."""
    return len(css.encode("utf-8")) / 1024


def inline_stylesheet(tokens, css=None):
    """Token variables plus a generation's CSS, safe to embed in a <style> element."""
    parts = [css_variables(tokens)]
    if css:
        parts.append(css)
    return "\n".join(parts).replace("</", "<\\/")
