"""Embedded JavaScript engine hosting one compiled component.

Generated code never runs through Python ``eval``; it runs inside a duktape
context (via dukpy) preloaded with ``runtime.js``.
"""
import os
from app.sandbox.errors import ComponentRuntimeError

RUNTIME_PATH = os.path.join(os.path.dirname(__file__), "runtime.js")

# Primitives bound as locals so generated code can call useState() etc. directly
HOOK_BINDINGS = (
    "useState",
    "useEffect",
    "useLayoutEffect",
    "useReducer",
    "useRef",
    "useMemo",
    "useCallback",
    "useContext",
    "useId",
    "Fragment",
    "createElement",
)

_runtime_source = None


def runtime_source():
    global _runtime_source
    if _runtime_source is None:
        with open(RUNTIME_PATH, encoding="utf-8") as fh:
            _runtime_source = fh.read()
    return _runtime_source


def build_factory(body, component_name):
    """Wrap transpiled code in a factory taking (React, tokens) and returning the component."""
    bindings = ",\n    ".join(f"{name} = React.{name}" for name in HOOK_BINDINGS)
    return (
        "var __previewFactory = function (React, tokens) {\n"
        f"  var {bindings};\n"
        f"{body}\n"
        f"  return typeof {component_name} === 'undefined' ? undefined : {component_name};\n"
        "};"
    )


DEFAULT_TIME_LIMIT_MS = 5000


class ComponentEngine:
    """One duktape context per render.

    ``time_limit`` (milliseconds) bounds each of compile and render; loops in
    transpiled code check it through ``__budget()``.
    """

    def __init__(self, interpreter, error_types, time_limit=DEFAULT_TIME_LIMIT_MS):
        self._interpreter = interpreter
        self._error_types = error_types
        self.time_limit = int(time_limit)

    @classmethod
    def create(cls, time_limit=DEFAULT_TIME_LIMIT_MS):
        import dukpy

        interpreter = dukpy.JSInterpreter()
        interpreter.evaljs(runtime_source())
        return cls(interpreter, (dukpy.JSRuntimeError,), time_limit=time_limit)

    def compile(self, factory_source, tokens):
        """Evaluate the factory and invoke it. Returns ``typeof`` the result."""
        try:
            return self._interpreter.evaljs(
                [
                    "__startBudget(dukpy['limit'])",
                    factory_source,
                    "var __previewComponent = __previewFactory(React, dukpy['tokens'])",
                    "typeof __previewComponent",
                ],
                tokens=tokens,
                limit=self.time_limit,
            )
        except self._error_types as e:
            raise ComponentRuntimeError.from_exception(e) from e

    def render(self):
        """Render the compiled component to static markup.

        Engine errors propagate unchanged for the ErrorBoundary to catch.
        """
        return self._interpreter.evaljs(
            [
                "__startBudget(dukpy['limit'])",
                "ReactStatic.renderToStaticMarkup(React.createElement(__previewComponent, null))",
            ],
            limit=self.time_limit,
        )
