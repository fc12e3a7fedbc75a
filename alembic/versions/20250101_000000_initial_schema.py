"""
Initial schema: users, organizations, memberships, funds, comments and votes.

Revision ID: 20250101_000000_initial_schema
Revises:
Create Date: 2025-01-01 00:00:00
"""

import sqlalchemy as sa

from alembic import op  # type: ignore[reportMissingImports]

# revision identifiers, used by Alembic.
revision = "20250101_000000_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def upgrade() -> None:
    # users
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("email_address", sa.String(length=320), nullable=False),
        sa.Column(
            "role", sa.String(length=20), server_default=sa.text("'regular'"), nullable=False
        ),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("role IN ('administrator', 'regular')", name="users_role_check"),
        sa.PrimaryKeyConstraint("id", name="users_pkey"),
        sa.UniqueConstraint("email_address", name="users_email_address_key"),
    )

    # organizations
    op.create_table(
        "organizations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="organizations_pkey"),
        sa.UniqueConstraint("name", name="organizations_name_key"),
    )

    # organization_memberships
    op.create_table(
        "organization_memberships",
        sa.Column("member_id", sa.Uuid(), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        _created_at(),
        sa.CheckConstraint(
            "role IN ('administrator', 'regular')", name="organization_memberships_role_check"
        ),
        sa.ForeignKeyConstraint(
            ["member_id"],
            ["users.id"],
            ondelete="CASCADE",
            name="organization_memberships_member_id_fkey",
        ),
        sa.ForeignKeyConstraint(
            ["organization_id"],
            ["organizations.id"],
            ondelete="CASCADE",
            name="organization_memberships_organization_id_fkey",
        ),
        sa.PrimaryKeyConstraint(
            "member_id", "organization_id", name="organization_memberships_pkey"
        ),
    )
    op.create_index(
        "idx_organization_memberships_organization",
        "organization_memberships",
        ["organization_id"],
    )

    # funds
    op.create_table(
        "funds",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column(
            "is_tax_deductible", sa.Boolean(), server_default=sa.text("false"), nullable=False
        ),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("creator_id", sa.Uuid(), nullable=True),
        sa.Column("updater_id", sa.Uuid(), nullable=True),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["organization_id"],
            ["organizations.id"],
            ondelete="CASCADE",
            name="funds_organization_id_fkey",
        ),
        sa.ForeignKeyConstraint(
            ["creator_id"], ["users.id"], ondelete="SET NULL", name="funds_creator_id_fkey"
        ),
        sa.ForeignKeyConstraint(
            ["updater_id"], ["users.id"], ondelete="SET NULL", name="funds_updater_id_fkey"
        ),
        sa.PrimaryKeyConstraint("id", name="funds_pkey"),
        sa.UniqueConstraint("organization_id", "name", name="funds_organization_id_name_key"),
    )
    op.create_index("idx_funds_organization", "funds", ["organization_id"])

    # comments
    op.create_table(
        "comments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("creator_id", sa.Uuid(), nullable=True),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["creator_id"], ["users.id"], ondelete="SET NULL", name="comments_creator_id_fkey"
        ),
        sa.PrimaryKeyConstraint("id", name="comments_pkey"),
    )

    # comment_votes
    op.create_table(
        "comment_votes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("comment_id", sa.Uuid(), nullable=False),
        sa.Column("creator_id", sa.Uuid(), nullable=True),
        sa.Column("type", sa.String(length=20), nullable=False),
        _created_at(),
        sa.CheckConstraint("type IN ('down_vote', 'up_vote')", name="comment_votes_type_check"),
        sa.ForeignKeyConstraint(
            ["comment_id"],
            ["comments.id"],
            ondelete="CASCADE",
            name="comment_votes_comment_id_fkey",
        ),
        sa.ForeignKeyConstraint(
            ["creator_id"],
            ["users.id"],
            ondelete="SET NULL",
            name="comment_votes_creator_id_fkey",
        ),
        sa.PrimaryKeyConstraint("id", name="comment_votes_pkey"),
        sa.UniqueConstraint(
            "comment_id", "creator_id", name="comment_votes_comment_id_creator_id_key"
        ),
    )
    op.create_index(
        "idx_comment_votes_keyset",
        "comment_votes",
        ["comment_id", "type", "created_at", "creator_id"],
    )


def downgrade() -> None:
    op.drop_index("idx_comment_votes_keyset", table_name="comment_votes")
    op.drop_table("comment_votes")
    op.drop_table("comments")
    op.drop_index("idx_funds_organization", table_name="funds")
    op.drop_table("funds")
    op.drop_index(
        "idx_organization_memberships_organization", table_name="organization_memberships"
    )
    op.drop_table("organization_memberships")
    op.drop_table("organizations")
    op.drop_table("users")
