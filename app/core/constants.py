# app/core/constants.py

from app.models.enums import PermissionAction

# ==========================================================
# FIXED PERMISSION SETS
# ==========================================================
ADMIN_PERMISSIONS = frozenset(PermissionAction)

# Added on top of the department's own list for its manager
MANAGER_DEFAULT_PERMISSIONS = frozenset({
    PermissionAction.VIEW_DASHBOARD,
    PermissionAction.VIEW_USERS,
    PermissionAction.VIEW_COURSES,
})

# ==========================================================
# PROFILE ID PREFIXES
# ==========================================================
STAFF_ID_PREFIX = "staff"
USER_ID_PREFIX = "user"
ADMIN_ID_PREFIX = "admin"
