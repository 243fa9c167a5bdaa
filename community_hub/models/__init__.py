from .user import User
from .community import Community
from .community_membership import (
    CommunityMembership,
    ROLE_ORGANIZER,
    ROLE_ADMIN,
    ROLE_MEMBER,
    ROLE_CHOICES,
    JOINABLE_ROLES,
)
from .invitation_code import InvitationCode, CODE_LENGTH
from .user_connection import UserConnection, CONNECTION_INVITED_BY

__all__ = [
    "User",
    "Community",
    "CommunityMembership",
    "InvitationCode",
    "UserConnection",
    "ROLE_ORGANIZER",
    "ROLE_ADMIN",
    "ROLE_MEMBER",
    "ROLE_CHOICES",
    "JOINABLE_ROLES",
    "CODE_LENGTH",
    "CONNECTION_INVITED_BY",
]
