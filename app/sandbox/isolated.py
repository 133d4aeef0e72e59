"""Isolated-document execution: a standalone srcdoc loaded in a sandboxed iframe.

The browser transpiles and mounts the component inside an opaque-origin
frame limited to ``allow-scripts``: no same-origin access, no top navigation,
no forms, no popups. Suitable for untrusted generated code.
"""
import logging
from flask import render_template
from app.sandbox.engine import HOOK_BINDINGS
from app.sandbox.errors import PreviewError, PreviewInputError
from app.sandbox.extractor import extract_component_name
from app.sandbox.normalizer import normalize_code
from app.sandbox.result import RenderResult
from app.services.design_tokens import tailwind_config, to_plain
from app.services.stylesheet_service import inline_stylesheet

logger = logging.getLogger(__name__)

DOCUMENT_CSP = "; ".join(
    (
        "default-src 'none'",
        "script-src 'self' 'unsafe-inline' 'unsafe-eval'",
        "style-src 'self' 'unsafe-inline'",
        "img-src 'self' data: https: http:",
        "connect-src 'self'",
    )
)
ERROR_DOCUMENT_CSP = "default-src 'none'; style-src 'unsafe-inline'"
FRAME_SANDBOX = "allow-scripts"
DEFAULT_VENDOR_BASE = "/static/vendor"


def build_src_doc(code, tokens, css=None, vendor_base=DEFAULT_VENDOR_BASE):
    """Return the complete preview document for ``code``."""
    if not isinstance(code, str) or not code.strip():
        raise PreviewInputError("Invalid code: expected non-empty component source.")
    normalized = normalize_code(code)
    return render_template(
        "sandbox/srcdoc.html",
        csp=DOCUMENT_CSP,
        vendor_base=vendor_base.rstrip("/"),
        tokens=tokens,
        token_data=to_plain(tokens),
        tailwind=tailwind_config(tokens),
        stylesheet=inline_stylesheet(tokens, css),
        source=normalized,
        # Used when the code has no default-exported function
        fallback_name=extract_component_name(normalized),
        # Same primitives the in-page factory binds, exposed as globals
        hooks=list(HOOK_BINDINGS),
    )


def build_error_src_doc(message, tokens):
    return render_template(
        "sandbox/error_srcdoc.html",
        csp=ERROR_DOCUMENT_CSP,
        tokens=tokens,
        message=message,
    )


class IsolatedDocumentRenderer:
    strategy = "isolated"

    def __init__(self, tokens, vendor_base=DEFAULT_VENDOR_BASE):
        self.tokens = tokens
        self.vendor_base = vendor_base

    @classmethod
    def from_config(cls, tokens, config):
        return cls(tokens, vendor_base=config.get("PREVIEW_VENDOR_BASE", DEFAULT_VENDOR_BASE))

    def render(self, code, css=None):
        """Render the iframe embedding. Runtime errors are handled inside the frame."""
        error = None
        try:
            document = build_src_doc(code, self.tokens, css=css, vendor_base=self.vendor_base)
        except Exception as e:
            logger.warning("Failed to build preview document: %s", e)
            error = e if isinstance(e, PreviewError) else PreviewError(str(e))
            document = build_error_src_doc(error.message, self.tokens)

        html = render_template("sandbox/isolated.html", srcdoc=document, sandbox=FRAME_SANDBOX)
        return RenderResult(
            strategy=self.strategy,
            html=html,
            ok=error is None,
            error=error,
        )
