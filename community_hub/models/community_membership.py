from datetime import datetime, timezone
from sqlalchemy import func, CheckConstraint, UniqueConstraint
from community_hub.extensions import db

# Keep simple text+CHECK for evolvable roles (no DB enum migration pain)
ROLE_MEMBER = "member"
ROLE_ADMIN = "admin"
ROLE_ORGANIZER = "organizer"
ROLE_CHOICES = (ROLE_ORGANIZER, ROLE_ADMIN, ROLE_MEMBER)
# organizer is only ever assigned when the community is created
JOINABLE_ROLES = (ROLE_ADMIN, ROLE_MEMBER)

class CommunityMembership(db.Model):
    __tablename__ = "community_memberships"

    id = db.Column(db.Integer, primary_key=True)

    community_id = db.Column(
        db.Integer,
        db.ForeignKey("communities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    role = db.Column(db.String(20), nullable=False, server_default=ROLE_MEMBER)

    joined_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(),
                          default=lambda: datetime.now(timezone.utc))

    # The unique constraint is the single source of truth for "one membership per pair";
    # the service never pre-checks before inserting.
    __table_args__ = (
        UniqueConstraint("community_id", "user_id", name="uq_community_memberships_community_user"),
        CheckConstraint(
            "role IN (" + ",".join(f"'{r}'" for r in ROLE_CHOICES) + ")",
            name="ck_community_memberships_role_valid",
        ),
    )

    def to_dict(self) -> dict:
        return {
            "community_id": self.community_id,
            "user_id": self.user_id,
            "role": self.role,
            "joined_at": self.joined_at.isoformat() if self.joined_at else None,
        }

    def __repr__(self) -> str:
        return f"<CommunityMembership community_id={self.community_id} user_id={self.user_id} role={self.role!r}>"
