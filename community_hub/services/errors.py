"""
Typed failures for the membership subsystem.

Business-rule violations are raised by the services and translated to HTTP
responses by the communities blueprint. The message text is part of the
contract: callers and tests match on it literally.
"""


class MembershipError(RuntimeError):
    """Base exception for all membership/invitation failures."""

    code = "membership_error"
    status = 400
    message = "Membership operation failed"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class DuplicateMembership(MembershipError):
    """Raised when the (community, user) pair already has a membership."""

    code = "duplicate_membership"
    status = 409
    message = "User is already a member of this community"


class NotAMember(MembershipError):
    """Raised when an action requires a membership the user does not hold."""

    code = "not_a_member"
    status = 404
    message = "User is not a member of this community"


class CannotLeaveOwnCommunity(MembershipError):
    """Raised when the organizer tries to leave their community."""

    code = "cannot_leave_own_community"
    status = 403
    message = "Organizer cannot leave their own community"


class InvalidCodeFormat(MembershipError):
    code = "invalid_code_format"
    status = 400
    message = "Invalid invitation code format"


class InvalidCode(MembershipError):
    code = "invalid_code"
    status = 404
    message = "Invitation code not found"


class InactiveCode(MembershipError):
    code = "inactive_code"
    status = 410
    message = "Invitation code is no longer active"


class CommunityNotFound(MembershipError):
    code = "community_not_found"
    status = 404
    message = "Community not found"


class InvalidRole(MembershipError):
    """Raised when a direct join asks for a role other than admin/member."""

    code = "invalid_role"
    status = 400
    message = "Role must be one of: admin, member"


class CodeGenerationExhausted(MembershipError):
    """Raised when every attempt to draw an unused code collided."""

    code = "code_generation_exhausted"
    status = 503
    message = "Failed to generate a unique invitation code"


class StoreError(MembershipError):
    """Infrastructure failure (unreachable DB, timeout, unexpected SQL error)."""

    code = "store_error"
    status = 503
    message = "Membership store unavailable"
