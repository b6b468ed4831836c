"""Create product_tag_audits table.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create product_tag_audits table."""
    op.create_table(
        "product_tag_audits",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("product_id", sa.String(255), nullable=False),
        sa.Column("action", sa.String(20), nullable=False),
        sa.Column("tag", sa.String(255), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("error_message", sa.Text, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )

    # Per-product history lookups
    op.create_index(
        "ix_product_tag_audits_product_id_created_at",
        "product_tag_audits",
        ["product_id", "created_at"],
    )


def downgrade() -> None:
    """Drop product_tag_audits table."""
    op.drop_index(
        "ix_product_tag_audits_product_id_created_at",
        table_name="product_tag_audits",
    )
    op.drop_table("product_tag_audits")
