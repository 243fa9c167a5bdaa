"""
Community lookups used by the membership service.

Community CRUD proper lives outside this package; what is here is the
existence/organizer capability the membership rules depend on, plus creation
(which is where the organizer's membership and first code come from).
"""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from community_hub.extensions import db
from community_hub.models import Community, ROLE_ORGANIZER
from community_hub.observability import log_event
from . import invitation_codes, membership_store
from .errors import CommunityNotFound, StoreError


def community_exists(community_id: int) -> bool:
    try:
        return db.session.query(
            db.session.query(Community).filter(Community.id == community_id).exists()
        ).scalar()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StoreError() from exc


def organizer_of(community_id: int) -> Optional[int]:
    """The organizer's user id, or None when the community does not exist."""
    try:
        row = db.session.query(Community.organizer_id).filter(Community.id == community_id).one_or_none()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StoreError() from exc
    return row[0] if row else None


def create_community(name: str, organizer_id: int, parent_id: Optional[int] = None) -> Community:
    """
    Create a community with its organizer membership and the organizer's code.
    All three rows commit together.
    """
    name = (name or "").strip()
    if not name:
        raise ValueError("Community name is required")
    if parent_id is not None and not community_exists(parent_id):
        raise CommunityNotFound()

    with membership_store.transaction() as session:
        community = Community(name=name, organizer_id=organizer_id, parent_id=parent_id)
        session.add(community)
        session.flush()

        membership_store.insert_membership(
            session, community_id=community.id, user_id=organizer_id, role=ROLE_ORGANIZER
        )
        invitation_codes.issue_code_for_membership(session, organizer_id, community.id)

    log_event("community_created", community_id=community.id, organizer_id=organizer_id, parent_id=parent_id)
    return community


def list_child_communities(parent_id: int) -> List[Community]:
    if not community_exists(parent_id):
        raise CommunityNotFound()
    return (
        db.session.query(Community)
        .filter(Community.parent_id == parent_id)
        .order_by(Community.name)
        .all()
    )
