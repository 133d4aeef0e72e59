"""JSX transpiler backed by the Babel bundle shipped with dukpy.

The Babel bundle is large, so it is evaluated lazily, exactly once per
process, into a dedicated interpreter that every later transpile reuses. A
failed load is remembered and reported as TranspilerUnavailable on every
later call rather than retried per request.

Transpiled loops call ``__budget()`` first thing in their body; the render
engine uses it to stop components that never yield.
"""
import logging
import os
import threading
from app.sandbox.errors import TranspileError, TranspilerUnavailable

logger = logging.getLogger(__name__)

TRANSFORM_PATH = os.path.join(os.path.dirname(__file__), "transform.js")

# react includes the flow-strip-types transform, which drops leftover annotations
DEFAULT_PRESETS = ("es2015", "react")


def _load_dukpy():
    import dukpy
    from dukpy.babel import BABEL_COMPILER

    with open(BABEL_COMPILER, encoding="utf-8") as fh:
        babel_source = fh.read()
    with open(TRANSFORM_PATH, encoding="utf-8") as fh:
        transform_source = fh.read()

    interpreter = dukpy.JSInterpreter()
    interpreter.evaljs([babel_source, transform_source])
    return interpreter, (dukpy.JSRuntimeError,)


class Transpiler:
    def __init__(self, presets=DEFAULT_PRESETS, loader=_load_dukpy):
        self.presets = list(presets)
        self._loader = loader
        # Guards loading and every call into the interpreter, which is not thread-safe
        self._lock = threading.Lock()
        self._interpreter = None
        self._error_types = ()
        self._load_error = None

    @property
    def ready(self) -> bool:
        return self._interpreter is not None

    def load(self):
        """Load and warm up the transpiler. Safe to call from several threads."""
        with self._lock:
            if self._interpreter is not None:
                return
            if self._load_error is not None:
                raise TranspilerUnavailable(str(self._load_error))
            try:
                interpreter, error_types = self._loader()
                self._run(interpreter, "", "warm-up.jsx")
            except Exception as e:
                self._load_error = e
                logger.exception("Transpiler failed to load")
                raise TranspilerUnavailable(str(e)) from e
            self._interpreter = interpreter
            self._error_types = error_types
            logger.info("Transpiler loaded (presets=%s)", ",".join(self.presets))

    def transpile(self, source, filename="dynamic-component.jsx"):
        if self._interpreter is None:
            raise TranspilerUnavailable("Transpiler is not loaded.")
        try:
            with self._lock:
                return self._run(self._interpreter, source, filename)
        except self._error_types as e:
            logger.warning("Transpile failed for %s: %s", filename, e)
            raise TranspileError(f"Failed to transpile component: {e}") from e

    def _run(self, interpreter, source, filename):
        return interpreter.evaljs(
            "__previewTransform(dukpy['source'], dukpy['options'])",
            source=source,
            options={"presets": self.presets, "filename": filename},
        )


_shared = None
_shared_lock = threading.Lock()


def shared_transpiler():
    global _shared
    with _shared_lock:
        if _shared is None:
            _shared = Transpiler()
        return _shared
