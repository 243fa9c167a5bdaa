from datetime import datetime, timezone
from sqlalchemy import func
from community_hub.extensions import db

class Community(db.Model):
    __tablename__ = "communities"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)

    # Owner; their membership is created with the community and never leaves
    organizer_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    # Simple parent/child listing only; no inherited membership
    parent_id = db.Column(
        db.Integer,
        db.ForeignKey("communities.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(),
                           default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(),
                           default=lambda: datetime.now(timezone.utc), onupdate=func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "organizer_id": self.organizer_id,
            "parent_id": self.parent_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<Community id={self.id} name={self.name!r} organizer_id={self.organizer_id}>"
