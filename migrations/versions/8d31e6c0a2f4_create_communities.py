"""create communities

Revision ID: 8d31e6c0a2f4
Revises: 4f2c9a1b7e01
Create Date: 2025-09-02 12:20:05.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '8d31e6c0a2f4'
down_revision = '4f2c9a1b7e01'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "communities",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("organizer_id", sa.Integer(), nullable=False),
        sa.Column("parent_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),

        sa.ForeignKeyConstraint(["organizer_id"], ["users.id"], name="fk_communities_organizer", ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["parent_id"], ["communities.id"], name="fk_communities_parent", ondelete="SET NULL"),
    )

    op.create_index("ix_communities_organizer_id", "communities", ["organizer_id"])
    op.create_index("ix_communities_parent_id", "communities", ["parent_id"])


def downgrade():
    op.drop_index("ix_communities_parent_id", table_name="communities")
    op.drop_index("ix_communities_organizer_id", table_name="communities")
    op.drop_table("communities")
