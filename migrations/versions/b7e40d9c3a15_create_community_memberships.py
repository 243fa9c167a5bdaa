"""create community_memberships

Revision ID: b7e40d9c3a15
Revises: 8d31e6c0a2f4
Create Date: 2025-09-02 12:41:06.559201

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'b7e40d9c3a15'
down_revision = '8d31e6c0a2f4'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "community_memberships",
        sa.Column("id", sa.Integer(), primary_key=True),

        sa.Column("community_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),

        sa.Column("role", sa.String(length=20), nullable=False, server_default="member"),

        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),

        sa.ForeignKeyConstraint(["community_id"], ["communities.id"], name="fk_community_memberships_community", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_community_memberships_user", ondelete="CASCADE"),
        sa.CheckConstraint("role IN ('organizer','admin','member')", name="ck_community_memberships_role_valid"),
        # Concurrent joins race here; the service maps the violation to DuplicateMembership
        sa.UniqueConstraint("community_id", "user_id", name="uq_community_memberships_community_user"),
    )

    op.create_index("ix_community_memberships_community_id", "community_memberships", ["community_id"])
    op.create_index("ix_community_memberships_user_id", "community_memberships", ["user_id"])


def downgrade():
    op.drop_index("ix_community_memberships_user_id", table_name="community_memberships")
    op.drop_index("ix_community_memberships_community_id", table_name="community_memberships")
    op.drop_table("community_memberships")
