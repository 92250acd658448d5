from models.enums import UserRole

from .exceptions import AuthorizationError


class CheckRolePermission:
    async def check_authenticated(self, current_user):
        if current_user is None or current_user.role not in set(UserRole):
            raise AuthorizationError("Access Denied")
