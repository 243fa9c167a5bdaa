from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from community_hub.extensions import db
from community_hub.models import CommunityMembership, InvitationCode, UserConnection, CONNECTION_INVITED_BY
from .errors import MembershipError, StoreError

MEMBERSHIP_UNIQUE_CONSTRAINT = "uq_community_memberships_community_user"


def is_unique_violation(exc: IntegrityError, constraint_name: str, table: str) -> bool:
    """
    True when the IntegrityError was raised by the named unique constraint.

    Postgres (psycopg2) reports the constraint name in diag; SQLite only names the
    table/columns in the message ("UNIQUE constraint failed: <table>.<col>, ...").
    """
    orig = getattr(exc, "orig", None)
    diag = getattr(orig, "diag", None)
    name = getattr(diag, "constraint_name", None)
    if name:
        return name == constraint_name
    text = str(orig or exc)
    return ("UNIQUE constraint failed" in text and f"{table}." in text) or constraint_name in text


def insert_membership(session: Session, *, community_id: int, user_id: int, role: str) -> CommunityMembership:
    """
    Add and flush a membership row.
    IntegrityError from the (community_id, user_id) constraint propagates to the caller.
    """
    membership = CommunityMembership(community_id=community_id, user_id=user_id, role=role)
    session.add(membership)
    session.flush()
    return membership


def find_membership(session: Session, *, community_id: int, user_id: int) -> Optional[CommunityMembership]:
    return (
        session.query(CommunityMembership)
        .filter_by(community_id=community_id, user_id=user_id)
        .one_or_none()
    )


def delete_membership(session: Session, *, community_id: int, user_id: int) -> int:
    """Delete the pair's membership; returns the number of rows removed (0 or 1)."""
    return (
        session.query(CommunityMembership)
        .filter_by(community_id=community_id, user_id=user_id)
        .delete(synchronize_session="fetch")
    )


def list_for_community(session: Session, community_id: int) -> List[CommunityMembership]:
    return (
        session.query(CommunityMembership)
        .filter(CommunityMembership.community_id == community_id)
        .order_by(CommunityMembership.joined_at.desc(), CommunityMembership.id.desc())
        .all()
    )


def list_for_user(session: Session, user_id: int) -> List[CommunityMembership]:
    return (
        session.query(CommunityMembership)
        .filter(CommunityMembership.user_id == user_id)
        .order_by(CommunityMembership.joined_at.desc(), CommunityMembership.id.desc())
        .all()
    )


def memberships_without_active_code(session: Session) -> List[CommunityMembership]:
    """Memberships whose owner holds no active invitation code for that community."""
    return (
        session.query(CommunityMembership)
        .outerjoin(
            InvitationCode,
            and_(
                InvitationCode.user_id == CommunityMembership.user_id,
                InvitationCode.community_id == CommunityMembership.community_id,
                InvitationCode.is_active.is_(True),
            ),
        )
        .filter(InvitationCode.code.is_(None))
        .order_by(CommunityMembership.id)
        .all()
    )


def add_invited_by_connection(session: Session, *, community_id: int, user_id: int, other_id: int) -> Optional[UserConnection]:
    """
    Record that user_id joined community_id through other_id's code.
    Existing rows are left as they are; returns None in that case.
    """
    existing = (
        session.query(UserConnection)
        .filter_by(community_id=community_id, user_id=user_id, other_id=other_id)
        .one_or_none()
    )
    if existing:
        return None
    conn = UserConnection(
        community_id=community_id,
        user_id=user_id,
        other_id=other_id,
        type=CONNECTION_INVITED_BY,
    )
    session.add(conn)
    session.flush()
    return conn


@contextmanager
def transaction() -> Iterator[Session]:
    """
    One unit of work on the request-scoped session: commit on success, roll back on any failure.

    Typed membership errors pass through untouched; other SQLAlchemy failures
    surface as StoreError with the driver error chained.
    """
    session = db.session
    try:
        yield session
        session.commit()
    except MembershipError:
        session.rollback()
        raise
    except SQLAlchemyError as exc:
        session.rollback()
        raise StoreError() from exc
