"""In-page execution: compile the component and render it into the host page.

The only isolation here is CSS containment on the wrapper element. Generated
code runs in an embedded engine without network or DOM access, but its output
lands in the host document, so this renderer is meant for trusted/internal use.
Use the isolated renderer for untrusted code.
"""
import logging
from concurrent.futures import ThreadPoolExecutor, wait
from functools import partial
from flask import render_template
from app.sandbox.boundary import ErrorBoundary, render_error_panel
from app.sandbox.engine import ComponentEngine, build_factory
from app.sandbox.errors import (
    ComponentNotFoundError,
    NotAComponentError,
    PreviewError,
    PreviewInputError,
)
from app.sandbox.extractor import extract_component_name
from app.sandbox.normalizer import normalize_code, strip_exports
from app.sandbox.result import RenderResult
from app.sandbox.transpiler import shared_transpiler
from app.services.design_tokens import to_plain
from app.services.stylesheet_service import inline_stylesheet

logger = logging.getLogger(__name__)

CONTAINER_STYLE = (
    "position: relative; isolation: isolate; contain: layout style paint; overflow: auto;"
)

_setup_pool = ThreadPoolExecutor(max_workers=4, thread_name_prefix="preview-setup")


class InPageRenderer:
    strategy = "inpage"

    def __init__(
        self, tokens, transpiler=None, engine_factory=None, executor=None, script_timeout=5.0
    ):
        self.tokens = tokens
        self.transpiler = transpiler or shared_transpiler()
        self._engine_factory = engine_factory or partial(
            ComponentEngine.create, time_limit=int(script_timeout * 1000)
        )
        self._executor = executor or _setup_pool

    @classmethod
    def from_config(cls, tokens, config):
        return cls(tokens, script_timeout=config.get("PREVIEW_SCRIPT_TIMEOUT", 5.0))

    def render(self, code, css=None):
        """Render ``code`` to HTML. Never raises for bad generated code."""
        try:
            name, body = self._prepare_source(code)
            stylesheet = self._await_preconditions(css)
            engine = self._compile(body, name)
        except PreviewError as e:
            logger.warning("In-page preview setup failed (%s): %s", e.title, e.message)
            return RenderResult.failed(self.strategy, e, render_error_panel(e))

        # Fresh boundary per render: no error state survives a re-run
        boundary = ErrorBoundary()
        markup = boundary.render(engine.render)
        html = render_template(
            "sandbox/inpage.html",
            markup=markup,
            stylesheet=stylesheet,
            component_name=name,
            container_style=CONTAINER_STYLE,
        )
        return RenderResult(
            strategy=self.strategy,
            html=html,
            ok=not boundary.has_error,
            component_name=name,
            error=boundary.error,
        )

    def _prepare_source(self, code):
        if not isinstance(code, str) or not code.strip():
            raise PreviewInputError("Invalid code: expected non-empty component source.")
        normalized = normalize_code(code)
        name = extract_component_name(normalized)
        if not name:
            raise ComponentNotFoundError("No component definition found in the generated code.")
        return name, strip_exports(normalized)

    def _await_preconditions(self, css):
        """Prepare the stylesheet and load the transpiler concurrently.

        Either may finish first; compilation starts only after both settle.
        A stylesheet failure only costs styling, a transpiler failure is fatal.
        """
        stylesheet_future = self._executor.submit(inline_stylesheet, self.tokens, css)
        transpiler_future = self._executor.submit(self.transpiler.load)
        wait((stylesheet_future, transpiler_future))

        try:
            stylesheet = stylesheet_future.result()
        except Exception:
            logger.exception("Stylesheet preparation failed, rendering unstyled")
            stylesheet = ""
        transpiler_future.result()
        return stylesheet

    def _compile(self, body, name):
        compiled = self.transpiler.transpile(body, filename=f"{name}.jsx")
        engine = self._engine_factory()
        kind = engine.compile(build_factory(compiled, name), to_plain(self.tokens))
        if kind != "function":
            raise NotAComponentError(
                f"Generated artifact is not a component: '{name}' is {kind or 'undefined'}."
            )
        return engine


def warm_up():
    """Start loading the shared transpiler in the background."""
    return _setup_pool.submit(shared_transpiler().load)
