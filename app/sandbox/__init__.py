"""Turning generated component source into a live preview.

Two renderers share one contract, ``render(code, css=None) -> RenderResult``:

- ``inpage``: compiled and rendered server-side, embedded in the host page
  behind CSS containment only. For trusted code.
- ``isolated``: a standalone document run by the browser in a sandboxed
  iframe. For untrusted code.

Which one is used is configuration (``PREVIEW_ISOLATION``), not a subclass.
"""
import logging
from flask import current_app
from app.sandbox.inpage import InPageRenderer
from app.sandbox.isolated import IsolatedDocumentRenderer
from app.services.design_tokens import load_tokens

logger = logging.getLogger(__name__)

RENDERERS = {
    InPageRenderer.strategy: InPageRenderer,
    IsolatedDocumentRenderer.strategy: IsolatedDocumentRenderer,
}


def get_renderer(isolation=None, tokens=None):
    """Build the renderer for ``isolation`` (defaults to PREVIEW_ISOLATION)."""
    isolation = isolation or current_app.config["PREVIEW_ISOLATION"]
    renderer_cls = RENDERERS.get(isolation)
    if renderer_cls is None:
        raise ValueError(f"Unknown preview isolation: {isolation}")
    tokens = tokens if tokens is not None else load_tokens()
    return renderer_cls.from_config(tokens, current_app.config)


def resolve_isolation(requested=None):
    """Isolation level for a request asking for ``requested``.

    The configured level is always allowed. Asking for ``inpage`` on top of an
    isolated default needs PREVIEW_ALLOW_INPAGE; otherwise the configured
    level is used. Unknown levels raise ValueError.
    """
    configured = current_app.config["PREVIEW_ISOLATION"]
    if not requested or requested == configured:
        return configured
    if not isinstance(requested, str) or requested not in RENDERERS:
        raise ValueError(f"Unknown preview isolation: {requested}")
    if requested == InPageRenderer.strategy and not current_app.config["PREVIEW_ALLOW_INPAGE"]:
        logger.info("In-page preview requested but not enabled, using %s", configured)
        return configured
    return requested
