from datetime import datetime, timezone
from sqlalchemy import func, CheckConstraint, UniqueConstraint
from community_hub.extensions import db

CONNECTION_INVITED_BY = "invited_by"

class UserConnection(db.Model):
    """Who brought whom into a community (joiner -> code owner)."""
    __tablename__ = "user_connections"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    other_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    community_id = db.Column(
        db.Integer,
        db.ForeignKey("communities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type = db.Column(db.String(20), nullable=False, server_default=CONNECTION_INVITED_BY)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(),
                           default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("community_id", "user_id", "other_id", name="uq_user_connections_community_pair"),
        CheckConstraint("type = 'invited_by'", name="ck_user_connections_type_valid"),
    )

    def __repr__(self) -> str:
        return f"<UserConnection user_id={self.user_id} other_id={self.other_id} community_id={self.community_id}>"
