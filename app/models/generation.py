import uuid
from datetime import datetime, timezone
from sqlalchemy.orm import validates
from app.extensions import db


class InvalidStatusTransition(ValueError):
    pass


class Generation(db.Model):
    __tablename__ = "generations"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    prompt = db.Column(db.Text, nullable=False)
    style = db.Column(db.String(20), default="default")
    template = db.Column(db.String(20))
    code = db.Column(db.Text, nullable=False, default="")
    css = db.Column(db.Text)
    status = db.Column(db.String(20), nullable=False, default="pending", index=True)
    attempts = db.Column(db.Integer, nullable=False, default=0)
    error_message = db.Column(db.Text)
    screenshot_url = db.Column(db.String(1024))
    screenshot_key = db.Column(db.String(512))
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    assets = db.relationship(
        "Asset",
        backref="generation",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="Asset.created_at.desc()",
    )

    STYLES = {"default", "light", "modern"}
    TEMPLATES = {"landing", "form", "card", "general"}
    STATUSES = {"pending", "completed", "failed"}
    TERMINAL_STATUSES = {"completed", "failed"}

    @validates("status")
    def _validate_status(self, key, value):
        """Status only moves forward: pending → completed | failed."""
        if value not in self.STATUSES:
            raise InvalidStatusTransition(f"Unknown status: {value}")
        current = self.status
        if current is None or current == value:
            return value
        if current != "pending":
            raise InvalidStatusTransition(f"Cannot move {current} → {value}")
        return value

    @property
    def is_terminal(self):
        return self.status in self.TERMINAL_STATUSES

    def to_dict(self, include_assets=False, asset_count=None):
        data = {
            "id": self.id,
            "prompt": self.prompt,
            "style": self.style,
            "template": self.template,
            "code": self.code,
            "css": self.css,
            "status": self.status,
            "attempts": self.attempts,
            "error": self.error_message,
            "screenshot_url": self.screenshot_url,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if include_assets:
            data["assets"] = [asset.to_dict() for asset in self.assets]
        if asset_count is not None:
            data["asset_count"] = asset_count
        return data

    def __repr__(self):
        return f"<Generation {self.id} [{self.status}]>"
