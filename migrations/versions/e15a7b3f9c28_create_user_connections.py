"""create user_connections (invited_by)

Revision ID: e15a7b3f9c28
Revises: c92f18e4b6d0
Create Date: 2025-09-04 19:02:41.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'e15a7b3f9c28'
down_revision = 'c92f18e4b6d0'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "user_connections",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("other_id", sa.Integer(), nullable=False),
        sa.Column("community_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False, server_default="invited_by"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),

        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_user_connections_user", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["other_id"], ["users.id"], name="fk_user_connections_other", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["community_id"], ["communities.id"], name="fk_user_connections_community", ondelete="CASCADE"),
        sa.CheckConstraint("type = 'invited_by'", name="ck_user_connections_type_valid"),
        sa.UniqueConstraint("community_id", "user_id", "other_id", name="uq_user_connections_community_pair"),
    )

    op.create_index("ix_user_connections_user_id", "user_connections", ["user_id"])
    op.create_index("ix_user_connections_other_id", "user_connections", ["other_id"])
    op.create_index("ix_user_connections_community_id", "user_connections", ["community_id"])


def downgrade():
    op.drop_index("ix_user_connections_community_id", table_name="user_connections")
    op.drop_index("ix_user_connections_other_id", table_name="user_connections")
    op.drop_index("ix_user_connections_user_id", table_name="user_connections")
    op.drop_table("user_connections")
