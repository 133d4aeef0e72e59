import logging
from flask import render_template
from app.sandbox.errors import ComponentRuntimeError

logger = logging.getLogger(__name__)


def render_error_panel(error):
    """HTML panel for a PreviewError: title, message, hint and collapsible stack."""
    return render_template("sandbox/error_panel.html", error=error)


class ErrorBoundary:
    """Catches exceptions raised while a mounted component renders.

    Once an error is recorded the boundary keeps showing the error panel;
    recovery means mounting a new boundary with new input. Setup and compile
    failures are not routed through here.
    """

    def __init__(self):
        self.has_error = False
        self.error = None

    def render(self, render_children):
        if self.has_error:
            return render_error_panel(self.error)
        try:
            return render_children()
        except Exception as e:
            self.has_error = True
            self.error = ComponentRuntimeError.from_exception(e)
            logger.error("Component render failed: %s", self.error.message)
            return render_error_panel(self.error)
