"""Create posts table

Revision ID: 001
Revises: None
Create Date: 2021-08-14 06:02:52.570000+00:00

What:  Creates the `posts` table and the index backing the homepage query.
How:   Portable column types (sa.Uuid, DateTime(timezone=True)) so the same
       revision runs on PostgreSQL and on SQLite.

Rollback: downgrade() drops the table and every post in it.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "posts",

        # Insertion order; the tie-break for equal published_date values
        sa.Column("seq", sa.Integer(), autoincrement=True, nullable=False),

        # Public identifier, generated by the application on insert
        sa.Column("id", sa.Uuid(), nullable=False),

        sa.Column("headline", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("author", sa.Text(), nullable=False, server_default=sa.text("''")),

        sa.Column(
            "published_date",
            sa.DateTime(timezone=True),
            nullable=False,
            comment="Author-supplied publication timestamp (UTC)",
        ),

        # "images/<millis>-<token>_<name>" relative to the public root, or ""
        sa.Column(
            "featured_image",
            sa.String(512),
            nullable=False,
            server_default=sa.text("''"),
        ),

        sa.Column("content", sa.Text(), nullable=False, server_default=sa.text("''")),

        sa.PrimaryKeyConstraint("seq"),
        sa.UniqueConstraint("id", name="uq_posts_id"),
    )

    # Homepage: ORDER BY published_date DESC, seq ASC LIMIT 20
    op.create_index(
        "idx_posts_published_date",
        "posts",
        [sa.text("published_date DESC"), "seq"],
    )


def downgrade() -> None:
    op.drop_index("idx_posts_published_date", table_name="posts")
    op.drop_table("posts")
