"""Access decision evaluator.

Pure functions over a :class:`User` and an :class:`AccessCheck`. A denial is
an ordinary ``False``, never an exception.

Order of evaluation:
  1. inactive users have no access at all
  2. sysop users have access to everything
  3. admin access to the asserted account implies member access
  4. otherwise every asserted account must be a member account and, unless
     the user has ``sections_all``, every asserted section must be granted

Admin checks accept at most one account. A check asserting several accounts
is denied even when the user administers all of them.
"""
from provision.schemas.access import AccessCheck, AccessCheckResult
from provision.schemas.user import User


def has_basic_access(user: User) -> bool:
    """True if the user is active"""
    return user.active


def has_admin_access(user: User, check: AccessCheck) -> bool:
    """True if the user administers the (single) account in ``check``."""
    if not has_basic_access(user):
        return False

    if user.sysop:
        return True

    if len(check.accounts) > 1:
        return False

    return all(account in user.admin_accounts for account in check.accounts)


def has_access(user: User, check: AccessCheck) -> bool:
    """True if the user may access every account and section in ``check``."""
    if not has_basic_access(user):
        return False

    if user.sysop:
        return True

    if has_admin_access(user, check):
        return True

    if not all(account in user.accounts for account in check.accounts):
        return False

    if user.sections_all:
        return True

    return all(section in user.sections for section in check.sections)


def check_access(user: User, check: AccessCheck) -> AccessCheckResult:
    if has_access(user, check):
        return AccessCheckResult(access_check=check, status=True, message="Access granted")
    return AccessCheckResult(
        access_check=check,
        status=False,
        message=f"User {user.id} does not have access to the requested accounts or sections",
    )


def check_admin_access(user: User, check: AccessCheck) -> AccessCheckResult:
    if has_admin_access(user, check):
        return AccessCheckResult(access_check=check, status=True, message="Admin access granted")
    return AccessCheckResult(
        access_check=check,
        status=False,
        message=f"User {user.id} does not have admin access to the requested account",
    )
