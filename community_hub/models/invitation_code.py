"""
Per-member invitation codes.

• community_member_codes
  - PK code: 8 chars, unambiguous uppercase alphabet (see services.invitation_codes).
  - ux_community_member_codes_active_owner:
    UNIQUE INDEX (user_id, community_id) WHERE is_active
    At most one live code per member; inactive rows are kept as history.
"""
from datetime import datetime, timezone
from sqlalchemy import func, text, Index
from community_hub.extensions import db

CODE_LENGTH = 8

class InvitationCode(db.Model):
    __tablename__ = "community_member_codes"

    code = db.Column(db.String(CODE_LENGTH), primary_key=True)

    # owner of the code, i.e. the member who shares it
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    community_id = db.Column(
        db.Integer,
        db.ForeignKey("communities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    is_active = db.Column(db.Boolean, nullable=False, default=True, server_default=text("true"))

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(),
                           default=lambda: datetime.now(timezone.utc))
    deactivated_at = db.Column(db.DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index(
            "ux_community_member_codes_active_owner",
            "user_id",
            "community_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active"),
        ),
    )

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "user_id": self.user_id,
            "community_id": self.community_id,
            "is_active": bool(self.is_active),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<InvitationCode code={self.code!r} user_id={self.user_id} community_id={self.community_id} active={self.is_active}>"
