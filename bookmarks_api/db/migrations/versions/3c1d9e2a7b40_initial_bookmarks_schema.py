"""Initial bookmarks schema.

- users, admins
- files
- categories (self-referencing tree)
- tags (unique per owner)
- bookmarks
- bookmark_tags
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3c1d9e2a7b40"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _owner(table: str) -> sa.Column:
    return sa.Column(
        "owner_id",
        sa.Integer(),
        sa.ForeignKey("users.id", ondelete="CASCADE", name=f"fk_{table}_owner_id_users"),
        nullable=False,
    )


def upgrade() -> None:
    # Accounts
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=True),
        sa.Column("hashed_password", sa.Text(), nullable=False),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("settings", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("username", name="uq_users_username"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_table(
        "admins",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("hashed_password", sa.Text(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_admins"),
        sa.UniqueConstraint("email", name="uq_admins_email"),
    )

    # Stored files
    op.create_table(
        "files",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _owner("files"),
        sa.Column("file_name", sa.Text(), nullable=False),
        sa.Column("storage_path", sa.Text(), nullable=False),
        sa.Column("size", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_files"),
    )
    op.create_index("ix_files_owner_id", "files", ["owner_id"])

    # Categories
    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _owner("categories"),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("slug", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("icon", sa.Text(), nullable=True),
        sa.Column("color", sa.Text(), nullable=True),
        sa.Column(
            "parent_id",
            sa.Integer(),
            sa.ForeignKey("categories.id", ondelete="SET NULL", name="fk_categories_parent_id_categories"),
            nullable=True,
        ),
        sa.Column("archived", sa.DateTime(timezone=True), nullable=True),
        sa.Column("public", sa.DateTime(timezone=True), nullable=True),
        sa.Column("initial", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_categories"),
    )
    op.create_index("ix_categories_owner_id", "categories", ["owner_id"])

    # Tags
    op.create_table(
        "tags",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _owner("tags"),
        sa.Column("name", sa.Text(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_tags"),
        sa.UniqueConstraint("owner_id", "name", name="uq_tags_owner_name"),
    )
    op.create_index("ix_tags_owner_id", "tags", ["owner_id"])

    # Bookmarks
    op.create_table(
        "bookmarks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _owner("bookmarks"),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("domain", sa.Text(), nullable=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("author", sa.Text(), nullable=True),
        sa.Column("content_text", sa.Text(), nullable=True),
        sa.Column("content_html", sa.Text(), nullable=True),
        sa.Column("content_type", sa.Text(), nullable=True),
        sa.Column("content_published_date", sa.Text(), nullable=True),
        sa.Column("main_image_url", sa.Text(), nullable=True),
        sa.Column("icon_url", sa.Text(), nullable=True),
        sa.Column(
            "main_image_id",
            sa.Integer(),
            sa.ForeignKey("files.id", ondelete="SET NULL", name="fk_bookmarks_main_image_id_files"),
            nullable=True,
        ),
        sa.Column(
            "icon_id",
            sa.Integer(),
            sa.ForeignKey("files.id", ondelete="SET NULL", name="fk_bookmarks_icon_id_files"),
            nullable=True,
        ),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("importance", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("flagged", sa.DateTime(timezone=True), nullable=True),
        sa.Column("read", sa.DateTime(timezone=True), nullable=True),
        sa.Column("opened_times", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("opened_last", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "category_id",
            sa.Integer(),
            sa.ForeignKey("categories.id", ondelete="SET NULL", name="fk_bookmarks_category_id_categories"),
            nullable=True,
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_bookmarks"),
    )
    op.create_index("ix_bookmarks_owner_id", "bookmarks", ["owner_id"])
    op.create_index("ix_bookmarks_category_id", "bookmarks", ["category_id"])

    # Bookmark <-> tag links
    op.create_table(
        "bookmark_tags",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _owner("bookmark_tags"),
        sa.Column(
            "bookmark_id",
            sa.Integer(),
            sa.ForeignKey("bookmarks.id", ondelete="CASCADE", name="fk_bookmark_tags_bookmark_id_bookmarks"),
            nullable=False,
        ),
        sa.Column(
            "tag_id",
            sa.Integer(),
            sa.ForeignKey("tags.id", ondelete="CASCADE", name="fk_bookmark_tags_tag_id_tags"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_bookmark_tags"),
        sa.UniqueConstraint("bookmark_id", "tag_id", name="uq_bookmark_tags_bookmark_tag"),
    )
    op.create_index("ix_bookmark_tags_owner_id", "bookmark_tags", ["owner_id"])
    op.create_index("ix_bookmark_tags_bookmark_id", "bookmark_tags", ["bookmark_id"])
    op.create_index("ix_bookmark_tags_tag_id", "bookmark_tags", ["tag_id"])


def downgrade() -> None:
    op.drop_table("bookmark_tags")
    op.drop_table("bookmarks")
    op.drop_table("tags")
    op.drop_table("categories")
    op.drop_table("files")
    op.drop_table("admins")
    op.drop_table("users")
