from datetime import datetime, timezone
from app.extensions import db


class Asset(db.Model):
    __tablename__ = "assets"

    id = db.Column(db.Integer, primary_key=True)
    generation_id = db.Column(
        db.String(36),
        db.ForeignKey("generations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    kind = db.Column(db.String(20), nullable=False)  # screenshot
    path = db.Column(db.String(512), nullable=False)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    KINDS = {"screenshot"}

    def to_dict(self):
        return {
            "id": self.id,
            "kind": self.kind,
            "path": self.path,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Asset {self.kind} for {self.generation_id}>"
