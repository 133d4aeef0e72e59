class PreviewError(Exception):
    """Recoverable preview failure, shown to the user as an error panel."""

    title = "Preview error"
    hint = None

    def __init__(self, message, stack=None):
        super().__init__(message)
        self.message = message
        self.stack = stack

    def to_dict(self):
        body = {"type": type(self).__name__, "title": self.title, "message": self.message}
        if self.hint:
            body["hint"] = self.hint
        if self.stack:
            body["stack"] = self.stack
        return body


class PreviewInputError(PreviewError):
    title = "Invalid code"


class ComponentNotFoundError(PreviewError):
    title = "Component not found"
    hint = "Make sure to export default function ComponentName() { ... }"


class TranspilerUnavailable(PreviewError):
    title = "Transpiler failed to load"
    hint = "Reload the preview. If it keeps failing, check the server logs."


class TranspileError(PreviewError):
    title = "Transpile error"
    hint = "The generated code has a syntax error. Try regenerating this component."


class NotAComponentError(PreviewError):
    title = "Not a component"
    hint = "The named export must be a function returning JSX."


class ComponentRuntimeError(PreviewError):
    title = "Component render error"

    @classmethod
    def from_exception(cls, exc):
        text = str(exc) or type(exc).__name__
        # Engine errors carry the JS stack after the first line
        message, _, stack = text.partition("\n")
        return cls(message.strip(), stack=stack.strip() or None)
