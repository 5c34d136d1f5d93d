"""Create posts and post_views tables.

Revision ID: 20261019000000
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019000000"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "posts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=300), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("image", sa.String(length=1000), nullable=False),
        sa.Column("video", sa.String(length=1000), nullable=False, server_default=""),
        sa.Column("category", sa.String(length=100), nullable=False, server_default="uncategorized"),
        sa.Column("slug", sa.String(length=350), nullable=False),
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("title", name="uq_posts_title"),
    )
    op.create_index("ix_posts_slug", "posts", ["slug"], unique=True)
    op.create_index("ix_posts_user_id", "posts", ["user_id"])
    op.create_index("ix_posts_created_at", "posts", ["created_at"])
    op.create_index("ix_posts_updated_at", "posts", ["updated_at"])
    op.create_index("ix_posts_user_id_updated_at", "posts", ["user_id", "updated_at"])
    op.create_index("ix_posts_category_updated_at", "posts", ["category", "updated_at"])

    op.create_table(
        "post_views",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("viewer_id", sa.String(length=64), nullable=True),
        sa.Column("viewed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "post_id",
            sa.Integer(),
            sa.ForeignKey("posts.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )
    op.create_index("ix_post_views_post_id", "post_views", ["post_id"])


def downgrade() -> None:
    op.drop_index("ix_post_views_post_id", table_name="post_views")
    op.drop_table("post_views")
    op.drop_index("ix_posts_category_updated_at", table_name="posts")
    op.drop_index("ix_posts_user_id_updated_at", table_name="posts")
    op.drop_index("ix_posts_updated_at", table_name="posts")
    op.drop_index("ix_posts_created_at", table_name="posts")
    op.drop_index("ix_posts_user_id", table_name="posts")
    op.drop_index("ix_posts_slug", table_name="posts")
    op.drop_table("posts")
