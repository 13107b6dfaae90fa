from enum import Enum


class Role(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


# Roles that may review manual payments
ADMIN_ROLES = frozenset({Role.ADMIN, Role.SUPER_ADMIN})
