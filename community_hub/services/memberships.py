"""
Membership lifecycle: join, join with an invitation code, leave.

Every public function is one short transaction on the request-scoped session.
The caller's user id is always passed in explicitly; nothing here reads the
login session.

Per (user, community) pair:

    non-member --join--> member --leave--> non-member --join--> member (new code)

The organizer's membership is created with the community and has no leave.
"""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from community_hub.extensions import db
from community_hub.models import (
    CommunityMembership,
    InvitationCode,
    ROLE_MEMBER,
    JOINABLE_ROLES,
)
from community_hub.observability import log_event
from . import code_validator, communities, invitation_codes, membership_store
from .errors import (
    CannotLeaveOwnCommunity,
    CommunityNotFound,
    DuplicateMembership,
    InvalidRole,
    NotAMember,
    StoreError,
)


def _insert_or_duplicate(session, *, community_id: int, user_id: int, role: str) -> CommunityMembership:
    # No existence pre-check: two concurrent joins would both pass it.
    try:
        return membership_store.insert_membership(
            session, community_id=community_id, user_id=user_id, role=role
        )
    except IntegrityError as exc:
        if membership_store.is_unique_violation(
            exc, membership_store.MEMBERSHIP_UNIQUE_CONSTRAINT, CommunityMembership.__tablename__
        ):
            raise DuplicateMembership() from exc
        raise


def _join(user_id: int, community_id: int, role: str, invited_by: Optional[int] = None) -> CommunityMembership:
    if not communities.community_exists(community_id):
        raise CommunityNotFound()

    with membership_store.transaction() as session:
        membership = _insert_or_duplicate(session, community_id=community_id, user_id=user_id, role=role)
        invitation_codes.issue_code_for_membership(session, user_id, community_id)
        if invited_by is not None and invited_by != user_id:
            membership_store.add_invited_by_connection(
                session, community_id=community_id, user_id=user_id, other_id=invited_by
            )

    log_event(
        "membership_joined",
        community_id=community_id,
        user_id=user_id,
        role=role,
        via_code=invited_by is not None,
    )
    return membership


def join_community(user_id: int, community_id: int, role: str = ROLE_MEMBER) -> CommunityMembership:
    """
    Add user_id to community_id with the given role and mint their invitation code.

    Raises:
        InvalidRole: role is not admin/member (organizer is assigned at creation only).
        CommunityNotFound: no such community; checked before anything is written.
        DuplicateMembership: the pair already has a membership.
        StoreError: infrastructure failure; nothing was written.
    """
    if role not in JOINABLE_ROLES:
        raise InvalidRole()
    return _join(user_id, community_id, role)


def join_community_with_code(user_id: int, code: str) -> CommunityMembership:
    """
    Redeem another member's code. The joiner always becomes a plain member.

    Validator failures (InvalidCodeFormat, InvalidCode, InactiveCode) propagate
    unchanged; afterwards this behaves exactly like join_community.
    """
    try:
        resolved = code_validator.validate(db.session, code)
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StoreError() from exc
    return _join(user_id, resolved.community_id, ROLE_MEMBER, invited_by=resolved.owner_user_id)


def leave_community(user_id: int, community_id: int) -> None:
    """
    Remove the membership and switch off the member's code, atomically.

    Raises:
        CannotLeaveOwnCommunity: user_id organizes community_id.
        NotAMember: there was no membership to remove.
    """
    if communities.organizer_of(community_id) == user_id:
        raise CannotLeaveOwnCommunity()

    with membership_store.transaction() as session:
        # Delete-and-count rather than find-then-delete; a concurrent leave just sees 0 rows.
        removed = membership_store.delete_membership(session, community_id=community_id, user_id=user_id)
        if not removed:
            raise NotAMember()
        invitation_codes.deactivate_code(session, user_id, community_id)

    log_event("membership_left", community_id=community_id, user_id=user_id)


def get_invitation_code(user_id: int, community_id: int) -> InvitationCode:
    """Return the member's active code. Never mints one; codes are issued on join."""
    try:
        code = invitation_codes.get_active_code(db.session, user_id, community_id)
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StoreError() from exc
    if code is None:
        raise NotAMember()
    return code


def list_memberships(community_id: int) -> List[CommunityMembership]:
    """Members of a community, newest first."""
    if not communities.community_exists(community_id):
        raise CommunityNotFound()
    try:
        return membership_store.list_for_community(db.session, community_id)
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StoreError() from exc


def list_user_communities(user_id: int) -> List[CommunityMembership]:
    try:
        return membership_store.list_for_user(db.session, user_id)
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StoreError() from exc
