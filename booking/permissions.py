"""
Custom permission classes for role based access control.
"""
from rest_framework.permissions import SAFE_METHODS, BasePermission

ADMIN_ROLES = {"admin", "super_admin"}
CLINICAL_ROLES = {"super_admin", "admin", "doctor", "staff"}


def has_role(user, roles) -> bool:
    return bool(user and user.is_authenticated and getattr(user, "role", None) in roles)


def notification_roles(user) -> set:
    """Roles whose notifications ``user`` receives; super admins read the admin feed."""
    if not (user and user.is_authenticated):
        return set()
    role = getattr(user, "role", None)
    if role in ADMIN_ROLES:
        return {"admin"}
    return {role} if role in CLINICAL_ROLES else set()


class IsAdminRole(BasePermission):
    """Allow access only to administrators (admin or super_admin)."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return has_role(getattr(request, "user", None), ADMIN_ROLES)


class IsClinicalRole(BasePermission):
    """Administrators, doctors and front-desk staff."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return has_role(getattr(request, "user", None), CLINICAL_ROLES)


class IsQueueOwnerOrClinical(BasePermission):
    """Patients may only touch their own queue entries (expects ``obj.patient_id``)."""
    def has_object_permission(self, request, view, obj) -> bool:
        user = getattr(request, "user", None)
        if has_role(user, CLINICAL_ROLES):
            return True
        return bool(user and user.is_authenticated and obj.patient_id == user.id)


class IsAdminRoleOrReadOnly(BasePermission):
    """Any authenticated user may read; writes need an administrator."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        if request.method in SAFE_METHODS:
            return bool(user and user.is_authenticated)
        return has_role(user, ADMIN_ROLES)
