from em_core.iam.services.authentication import AuthenticationService, LoginResult
from em_core.iam.services.permissions import PermissionService
from em_core.iam.services.roles import RoleService
from em_core.iam.services.users import UserService

__all__ = [
    "AuthenticationService",
    "LoginResult",
    "PermissionService",
    "RoleService",
    "UserService",
]
