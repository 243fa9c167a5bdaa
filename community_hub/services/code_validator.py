from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from community_hub.models import CODE_LENGTH
from . import invitation_codes
from .errors import InvalidCodeFormat, InvalidCode, InactiveCode


@dataclass(frozen=True)
class ResolvedCode:
    community_id: int
    # informational only; this is the member who shared the code, not the joiner
    owner_user_id: int


def normalize_code(raw: Any) -> str:
    """Trim and uppercase; codes are typed by hand and often pasted with whitespace."""
    if not isinstance(raw, str):
        return ""
    return raw.strip().upper()


def is_well_formed(code: str) -> bool:
    return len(code) == CODE_LENGTH and code.isascii() and code.isalnum()


def validate(session: Session, raw_code: Any) -> ResolvedCode:
    """
    Resolve a presented code to its community and owner.

    Malformed input fails before the store is touched. An unknown code and a
    deactivated one fail differently so the caller can tell them apart.
    """
    code = normalize_code(raw_code)
    if not is_well_formed(code):
        raise InvalidCodeFormat()

    model = invitation_codes.lookup_by_code(session, code)
    if model is None:
        raise InvalidCode()
    if not model.is_active:
        raise InactiveCode()
    return ResolvedCode(community_id=model.community_id, owner_user_id=model.user_id)
