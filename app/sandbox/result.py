from dataclasses import dataclass
from typing import Optional
from app.sandbox.errors import PreviewError


@dataclass
class RenderResult:
    """Outcome of one render: either a mounted preview or an error panel."""

    strategy: str
    html: str
    ok: bool = True
    component_name: Optional[str] = None
    error: Optional[PreviewError] = None

    @classmethod
    def failed(cls, strategy, error, html):
        return cls(strategy=strategy, html=html, ok=False, error=error)

    def to_dict(self):
        return {
            "strategy": self.strategy,
            "ok": self.ok,
            "component": self.component_name,
            "html": self.html,
            "error": self.error.to_dict() if self.error else None,
        }
