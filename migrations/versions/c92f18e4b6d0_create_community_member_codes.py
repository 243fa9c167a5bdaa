"""create community_member_codes (+ partial unique on active owner)

Revision ID: c92f18e4b6d0
Revises: b7e40d9c3a15
Create Date: 2025-09-04 18:50:06.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'c92f18e4b6d0'
down_revision = 'b7e40d9c3a15'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "community_member_codes",
        sa.Column("code", sa.String(length=8), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("community_id", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("deactivated_at", sa.DateTime(timezone=True), nullable=True),

        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_community_member_codes_user", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["community_id"], ["communities.id"], name="fk_community_member_codes_community", ondelete="CASCADE"),
    )

    op.create_index("ix_community_member_codes_user_id", "community_member_codes", ["user_id"])
    op.create_index("ix_community_member_codes_community_id", "community_member_codes", ["community_id"])

    # One live code per (owner, community); deactivated rows stay for audit
    op.execute("""
        CREATE UNIQUE INDEX IF NOT EXISTS ux_community_member_codes_active_owner
        ON community_member_codes (user_id, community_id)
        WHERE is_active;
    """)


def downgrade():
    op.execute("DROP INDEX IF EXISTS ux_community_member_codes_active_owner;")
    op.drop_index("ix_community_member_codes_community_id", table_name="community_member_codes")
    op.drop_index("ix_community_member_codes_user_id", table_name="community_member_codes")
    op.drop_table("community_member_codes")
