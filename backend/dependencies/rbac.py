"""
RBAC dependencies for FastAPI routes
Role-based access control implemented as dependencies that run after authentication
"""
from fastapi import HTTPException, status, Request
import logging

logger = logging.getLogger(__name__)

RESOURCES_FOR_ROLES = {
    'Farmer': {
        'users/me': ['read', 'write', 'delete'],
        'users/nearby': ['read'],
        'produce': ['read', 'write', 'delete'],
        'orders': ['read'],
        'orders/status': ['write'],
        'tracking': ['read', 'write'],
    },
    'Admin': {
        'users/me': ['read', 'write', 'delete'],
        'users/nearby': ['read'],
        'produce': ['read'],
        'orders': ['read', 'write'],
        'orders/status': ['write'],
        'tracking': ['read', 'write'],
        'interests': ['read'],
        'interests/community': ['read'],
    },
    'User': {
        'users/me': ['read', 'write', 'delete'],
        'users/nearby': ['read'],
        'produce': ['read'],
        'orders': ['read'],
        'orders/status': ['write'],
        'tracking': ['read', 'write'],
        'interests': ['write'],
        'interests/me': ['read'],
    },
}


def has_permission(user_role: str, resource_name: str, required_permission: str) -> bool:
    """Check if user role has permission for the resource and action"""
    if user_role not in RESOURCES_FOR_ROLES:
        return False

    user_permissions = RESOURCES_FOR_ROLES[user_role]

    # Sub-resources are listed explicitly; no fallback to the parent entry
    if resource_name in user_permissions:
        return required_permission in user_permissions[resource_name]

    return False


def require_permission(resource: str, permission: str):
    """
    Create an RBAC dependency that checks permissions

    Args:
        resource: Resource name as listed in RESOURCES_FOR_ROLES
        permission: One of read, write, delete
    """
    def check_rbac(request: Request):
        """RBAC dependency function"""
        try:
            current_user = getattr(request.state, 'current_user', None)
            if not current_user:
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail="Authentication required"
                )

            user_role = current_user.get('role')

            logger.info(f"RBAC Check - User: {user_role}, Resource: {resource}, Permission: {permission}")

            if not has_permission(user_role, resource, permission):
                logger.warning(f"Access denied - User: {user_role}, Resource: {resource}, Permission: {permission}")
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="Access denied: insufficient permissions"
                )

            return True

        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"RBAC dependency error: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Authorization check failed"
            )

    return check_rbac


require_profile_read = require_permission("users/me", "read")
require_profile_write = require_permission("users/me", "write")
require_profile_delete = require_permission("users/me", "delete")

require_nearby_read = require_permission("users/nearby", "read")

require_produce_read = require_permission("produce", "read")
require_produce_write = require_permission("produce", "write")
require_produce_delete = require_permission("produce", "delete")

require_order_read = require_permission("orders", "read")
require_order_write = require_permission("orders", "write")
require_order_status_write = require_permission("orders/status", "write")

require_tracking_read = require_permission("tracking", "read")
require_tracking_write = require_permission("tracking", "write")

require_interest_read = require_permission("interests", "read")
require_interest_write = require_permission("interests", "write")
require_community_interest_read = require_permission("interests/community", "read")
require_own_interest_read = require_permission("interests/me", "read")
