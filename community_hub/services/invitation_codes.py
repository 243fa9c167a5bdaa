from __future__ import annotations

import secrets
from datetime import datetime, timezone
from typing import Optional

from flask import current_app, has_app_context
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from community_hub.models import InvitationCode, CODE_LENGTH
from community_hub.observability import log_event
from . import membership_store
from .errors import CodeGenerationExhausted

# Excludes 0, 1, I and O so codes survive being read aloud or copied by hand
CODE_ALPHABET = "23456789ABCDEFGHJKLMNPQRSTUVWXYZ"
DEFAULT_MAX_ATTEMPTS = 5
# Primary key of community_member_codes, as named by Postgres
CODE_PRIMARY_KEY = "community_member_codes_pkey"


def _draw_code() -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def _is_code_taken(exc: IntegrityError) -> bool:
    """True when the insert lost the race for its code (primary key), not for the owner slot."""
    orig = getattr(exc, "orig", None)
    name = getattr(getattr(orig, "diag", None), "constraint_name", None)
    if name:
        return name == CODE_PRIMARY_KEY
    # SQLite: "UNIQUE constraint failed: community_member_codes.code"
    return str(orig or exc).rstrip().endswith(f"{InvitationCode.__tablename__}.code")


def _max_attempts() -> int:
    if has_app_context():
        return int(current_app.config.get("CODE_GENERATION_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS))
    return DEFAULT_MAX_ATTEMPTS


def generate_code(session: Session, max_attempts: Optional[int] = None) -> str:
    """
    Draw a random code not yet present in community_member_codes.

    Inactive codes still count as taken: codes are never reused.
    Raises CodeGenerationExhausted after max_attempts collisions.
    """
    attempts = max_attempts or _max_attempts()
    for attempt in range(1, attempts + 1):
        code = _draw_code()
        if session.get(InvitationCode, code) is None:
            return code
        log_event("invitation_code_collision", level="warning", attempt=attempt, max_attempts=attempts)
    raise CodeGenerationExhausted()


def lookup_by_code(session: Session, code: str) -> Optional[InvitationCode]:
    """Return the code row whatever its state; None only when the code was never issued."""
    return session.get(InvitationCode, code)


def get_active_code(session: Session, user_id: int, community_id: int) -> Optional[InvitationCode]:
    return (
        session.query(InvitationCode)
        .filter_by(user_id=user_id, community_id=community_id, is_active=True)
        .one_or_none()
    )


def issue_code_for_membership(session: Session, user_id: int, community_id: int) -> InvitationCode:
    """Return the pair's active code, minting and flushing a new one when there is none."""
    existing = get_active_code(session, user_id, community_id)
    if existing:
        return existing

    attempts = _max_attempts()
    for attempt in range(1, attempts + 1):
        model = InvitationCode(
            code=generate_code(session),
            user_id=user_id,
            community_id=community_id,
            is_active=True,
        )
        # Another transaction can claim the same code between generate_code and this insert.
        try:
            with session.begin_nested():
                session.add(model)
        except IntegrityError as exc:
            if not _is_code_taken(exc):
                raise
            log_event("invitation_code_insert_collision", level="warning", attempt=attempt, max_attempts=attempts)
            continue
        return model
    raise CodeGenerationExhausted()


def deactivate_code(session: Session, user_id: int, community_id: int) -> None:
    """Switch off the pair's active code. Nothing to do is not an error."""
    rows = (
        session.query(InvitationCode)
        .filter_by(user_id=user_id, community_id=community_id, is_active=True)
        .all()
    )
    now = datetime.now(timezone.utc)
    for row in rows:
        row.is_active = False
        row.deactivated_at = now
    if rows:
        session.flush()


def backfill_missing_codes(session: Session) -> int:
    """
    Issue a code for every membership that has no active one.
    Flushes only; the caller owns the commit. Returns the number of codes minted.
    """
    minted = 0
    for membership in membership_store.memberships_without_active_code(session):
        issue_code_for_membership(session, membership.user_id, membership.community_id)
        minted += 1
    return minted
