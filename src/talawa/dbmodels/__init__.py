"""
Database models for the Talawa API (authoritative ORM definitions).

This module defines the SQLAlchemy Base with a naming convention for stable
Alembic autogenerate diffs, and exposes `target_metadata` for Alembic.

Column types are kept dialect-neutral so the same models run on PostgreSQL
in production and on SQLite in the resolver tests.
"""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKeyConstraint,
    Index,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# Naming convention for deterministic constraint/index names in Alembic diffs
naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

USER_ROLES = ("administrator", "regular")
MEMBERSHIP_ROLES = ("administrator", "regular")
COMMENT_VOTE_TYPES = ("down_vote", "up_vote")


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _in_check(column: str, values: tuple[str, ...]) -> str:
    quoted = ", ".join(f"'{value}'" for value in values)
    return f"{column} IN ({quoted})"


class Base(DeclarativeBase):
    """Base class for all database models with type checking support."""

    metadata = MetaData(naming_convention=naming_convention)


class Users(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(_in_check("role", USER_ROLES), name="users_role_check"),
        PrimaryKeyConstraint("id", name="users_pkey"),
        UniqueConstraint("email_address", name="users_email_address_key"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, default=uuid4)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    email_address: Mapped[str] = mapped_column(String(320), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, server_default=text("'regular'"))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True), default=_utcnow, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(True))

    organization_memberships: Mapped[list["OrganizationMemberships"]] = relationship(
        "OrganizationMemberships", uselist=True, back_populates="member"
    )
    comment_votes: Mapped[list["CommentVotes"]] = relationship(
        "CommentVotes", uselist=True, back_populates="creator"
    )


class Organizations(Base):
    __tablename__ = "organizations"
    __table_args__ = (
        PrimaryKeyConstraint("id", name="organizations_pkey"),
        UniqueConstraint("name", name="organizations_name_key"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, default=uuid4)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True), default=_utcnow, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(True))

    memberships: Mapped[list["OrganizationMemberships"]] = relationship(
        "OrganizationMemberships", uselist=True, back_populates="organization"
    )
    funds: Mapped[list["Funds"]] = relationship("Funds", uselist=True, back_populates="organization")


class OrganizationMemberships(Base):
    __tablename__ = "organization_memberships"
    __table_args__ = (
        CheckConstraint(
            _in_check("role", MEMBERSHIP_ROLES), name="organization_memberships_role_check"
        ),
        ForeignKeyConstraint(
            ["member_id"],
            ["users.id"],
            ondelete="CASCADE",
            name="organization_memberships_member_id_fkey",
        ),
        ForeignKeyConstraint(
            ["organization_id"],
            ["organizations.id"],
            ondelete="CASCADE",
            name="organization_memberships_organization_id_fkey",
        ),
        PrimaryKeyConstraint("member_id", "organization_id", name="organization_memberships_pkey"),
        Index("idx_organization_memberships_organization", "organization_id"),
    )

    member_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    organization_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True), default=_utcnow, server_default=text("CURRENT_TIMESTAMP")
    )

    member: Mapped["Users"] = relationship("Users", back_populates="organization_memberships")
    organization: Mapped["Organizations"] = relationship(
        "Organizations", back_populates="memberships"
    )


class Funds(Base):
    __tablename__ = "funds"
    __table_args__ = (
        ForeignKeyConstraint(
            ["organization_id"],
            ["organizations.id"],
            ondelete="CASCADE",
            name="funds_organization_id_fkey",
        ),
        ForeignKeyConstraint(
            ["creator_id"], ["users.id"], ondelete="SET NULL", name="funds_creator_id_fkey"
        ),
        ForeignKeyConstraint(
            ["updater_id"], ["users.id"], ondelete="SET NULL", name="funds_updater_id_fkey"
        ),
        PrimaryKeyConstraint("id", name="funds_pkey"),
        UniqueConstraint("organization_id", "name", name="funds_organization_id_name_key"),
        Index("idx_funds_organization", "organization_id"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, default=uuid4)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    is_tax_deductible: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    organization_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    creator_id: Mapped[UUID | None] = mapped_column(Uuid)
    updater_id: Mapped[UUID | None] = mapped_column(Uuid)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True), default=_utcnow, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(True))

    organization: Mapped["Organizations"] = relationship("Organizations", back_populates="funds")


class Comments(Base):
    __tablename__ = "comments"
    __table_args__ = (
        ForeignKeyConstraint(
            ["creator_id"], ["users.id"], ondelete="SET NULL", name="comments_creator_id_fkey"
        ),
        PrimaryKeyConstraint("id", name="comments_pkey"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, default=uuid4)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    creator_id: Mapped[UUID | None] = mapped_column(Uuid)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True), default=_utcnow, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(True))

    votes: Mapped[list["CommentVotes"]] = relationship(
        "CommentVotes", uselist=True, back_populates="comment"
    )


class CommentVotes(Base):
    __tablename__ = "comment_votes"
    __table_args__ = (
        CheckConstraint(_in_check("type", COMMENT_VOTE_TYPES), name="comment_votes_type_check"),
        ForeignKeyConstraint(
            ["comment_id"],
            ["comments.id"],
            ondelete="CASCADE",
            name="comment_votes_comment_id_fkey",
        ),
        ForeignKeyConstraint(
            ["creator_id"],
            ["users.id"],
            ondelete="SET NULL",
            name="comment_votes_creator_id_fkey",
        ),
        PrimaryKeyConstraint("id", name="comment_votes_pkey"),
        UniqueConstraint("comment_id", "creator_id", name="comment_votes_comment_id_creator_id_key"),
        Index("idx_comment_votes_keyset", "comment_id", "type", "created_at", "creator_id"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, default=uuid4)
    comment_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    creator_id: Mapped[UUID | None] = mapped_column(Uuid)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True), default=_utcnow, server_default=text("CURRENT_TIMESTAMP")
    )

    comment: Mapped["Comments"] = relationship("Comments", back_populates="votes")
    creator: Mapped["Users | None"] = relationship("Users", back_populates="comment_votes")


# Expose for Alembic
target_metadata = Base.metadata
