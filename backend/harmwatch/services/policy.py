from harmwatch.models import Case, User, UserRole


def is_admin(user: User) -> bool:
    return user.role == UserRole.admin.value


def can_edit(user: User, case: Case) -> bool:
    """Owners and admins may change a case."""
    return user.id == case.created_by or is_admin(user)
