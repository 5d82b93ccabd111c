"""Count an authenticated user's view of a post once.

Revision ID: 20261020_post_views_user
Revises: 20261019_initial
Create Date: 2026-10-20

Duplicate (post_id, user_id) rows written by racing requests are removed and
view_count is recomputed before the partial unique index is created.
"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "20261020_post_views_user"
down_revision: str | None = "20261019_initial"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.execute(
        """
        DELETE FROM post_views
        WHERE user_id IS NOT NULL
          AND CAST(id AS TEXT) NOT IN (
            SELECT keep_id FROM (
              SELECT MIN(CAST(id AS TEXT)) AS keep_id
              FROM post_views
              WHERE user_id IS NOT NULL
              GROUP BY post_id, user_id
            ) AS kept
          )
        """
    )
    op.execute(
        """
        UPDATE posts SET view_count = (
          SELECT COUNT(*) FROM post_views WHERE post_views.post_id = posts.id
        )
        """
    )
    op.create_index(
        "uq_post_views_post_user",
        "post_views",
        ["post_id", "user_id"],
        unique=True,
        postgresql_where=sa.text("user_id IS NOT NULL"),
        sqlite_where=sa.text("user_id IS NOT NULL"),
    )


def downgrade() -> None:
    op.drop_index("uq_post_views_post_user", table_name="post_views")
