"""Create the contacts table.

Revision ID: 0001_create_contacts
Revises:
Create Date: 2026-10-19

In production this table is owned by the website's contact form
handler.  The migration exists so development and smoke-test databases
have the same shape.
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_create_contacts"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "contacts",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("phone", sa.Text(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("captcha_score", sa.Float(), nullable=True),
        sa.Column("acknowledged", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_on",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.Column(
            "updated_on",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
    )
    op.create_index("ix_contacts_acknowledged", "contacts", ["acknowledged"])


def downgrade() -> None:
    op.drop_index("ix_contacts_acknowledged", table_name="contacts")
    op.drop_table("contacts")
