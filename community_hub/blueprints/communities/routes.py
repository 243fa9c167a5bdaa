from flask import jsonify, request, current_app
from . import bp
from community_hub.extensions import limiter
from community_hub.models import ROLE_MEMBER, JOINABLE_ROLES
from community_hub.services import memberships
from community_hub.services.errors import MembershipError, InvalidRole
from community_hub.services.policy import (
    _error,
    can_manage,
    current_user_id,
    require_login,
    require_member,
)


def _join_by_code_limit():
    return current_app.config.get("JOIN_BY_CODE_RATE_LIMIT", "10 per minute")


def _json_body() -> dict:
    payload = request.get_json(silent=True)
    # arrays and scalars are valid JSON but carry no named fields
    return payload if isinstance(payload, dict) else {}


@bp.errorhandler(MembershipError)
def handle_membership_error(e: MembershipError):
    level = "warning" if e.status >= 500 else "info"
    getattr(current_app.logger, level)("%s %s -> %s", request.method, request.path, e.code)
    return jsonify(e.to_dict()), e.status


@bp.post("/<int:community_id>/join")
@require_login
def join(community_id: int):
    """
    Self-join as a plain member, or (organizers/admins only) add a user with a role.
    Body: {"role": "member"|"admin", "user_id": <int, defaults to caller>}
    """
    payload = _json_body()
    caller_id = current_user_id()

    role = payload.get("role") or ROLE_MEMBER
    if isinstance(role, str):
        role = role.strip().lower()
    if role not in JOINABLE_ROLES:
        raise InvalidRole()

    target_id = payload.get("user_id", caller_id)
    if isinstance(target_id, bool) or not isinstance(target_id, int):
        return jsonify({"error": "invalid_user_id", "message": "user_id must be an integer"}), 400

    if (role != ROLE_MEMBER or target_id != caller_id) and not can_manage(community_id, caller_id):
        return _error(403)

    membership = memberships.join_community(target_id, community_id, role)
    return jsonify(membership.to_dict()), 201


@bp.post("/join-by-code")
@limiter.limit(_join_by_code_limit)
@require_login
def join_by_code():
    payload = _json_body()
    membership = memberships.join_community_with_code(current_user_id(), payload.get("code"))
    return jsonify(membership.to_dict()), 201


@bp.post("/<int:community_id>/leave")
@require_login
def leave(community_id: int):
    memberships.leave_community(current_user_id(), community_id)
    return ("", 204)


@bp.get("/<int:community_id>/invitation-code")
@require_login
def invitation_code(community_id: int):
    code = memberships.get_invitation_code(current_user_id(), community_id)
    return jsonify(code.to_dict()), 200


@bp.get("/<int:community_id>/members")
@require_member
def members(community_id: int):
    rows = memberships.list_memberships(community_id)
    return jsonify([m.to_dict() for m in rows]), 200


@bp.get("/mine")
@require_login
def my_communities():
    rows = memberships.list_user_communities(current_user_id())
    return jsonify([m.to_dict() for m in rows]), 200
