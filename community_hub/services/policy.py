from functools import wraps
from flask import jsonify
from flask_login import current_user
from community_hub.extensions import db
from community_hub.models import ROLE_ADMIN, ROLE_ORGANIZER
from community_hub.services import membership_store

MANAGER_ROLES = (ROLE_ORGANIZER, ROLE_ADMIN)

def _error(code: int):
    # JSON-only API: always answer with the same error shape
    return jsonify({"error": {401: "unauthorized", 403: "forbidden", 404: "not_found"}[code], "code": code}), code

def current_user_id():
    if not getattr(current_user, "is_authenticated", False):
        return None
    return getattr(current_user, "id", None)

def role_in(community_id: int, user_id: int):
    """The user's role in the community, or None for non-members."""
    m = membership_store.find_membership(db.session, community_id=community_id, user_id=user_id)
    return m.role if m else None

def can_manage(community_id: int, user_id: int) -> bool:
    """Organizers and admins may add members with elevated roles."""
    return role_in(community_id, user_id) in MANAGER_ROLES

def require_login(fn):
    @wraps(fn)
    def _wrap(*args, **kwargs):
        if current_user_id() is None:
            return _error(401)
        return fn(*args, **kwargs)
    return _wrap

def require_member(fn):
    """Caller must belong to the community named by the view's community_id."""
    @wraps(fn)
    def _wrap(*args, **kwargs):
        uid = current_user_id()
        if uid is None:
            return _error(401)
        if role_in(kwargs.get("community_id"), uid) is None:
            return _error(404)  # anti-enumeration
        return fn(*args, **kwargs)
    return _wrap
