# policy.py: décisions d'accès pures, sans I/O.
# Les appelants traduisent un refus en Forbidden.
from models import UserRole, UserStatus

ADMINISTRATIVE_ROLES = {UserRole.admin.value, UserRole.volunteer.value}


def _field(user, name):
    if user is None:
        return None
    if isinstance(user, dict):
        return user.get(name)
    return getattr(user, name, None)


def can_create_request(user) -> bool:
    return user is not None and _field(user, "status") != UserStatus.blocked.value


def can_administer(user) -> bool:
    return _field(user, "role") in ADMINISTRATIVE_ROLES


def can_moderate_blog(user) -> bool:
    return _field(user, "role") == UserRole.admin.value


def can_manage_users(user) -> bool:
    return _field(user, "role") == UserRole.admin.value


def can_delete_request(user, record) -> bool:
    if user is None or record is None:
        return False
    return (
        _field(user, "email") == record.get("requesterEmail")
        or _field(user, "role") == UserRole.admin.value
    )
