"""Provisioning error taxonomy.

Every error raised by the engine derives from :class:`ProvisionError` and
carries the HTTP status and error code the API layer answers with. All of
them describe a single failed operation; nothing is retried by the engine.

    WeakSecretError          400  secret plaintext below the minimum length
    MissingSecretError       400  new resource without a resolvable secret
    InvalidQueryError        400  search query the store cannot run
    ClaimError               401  missing, invalid or expired user claims
    HierarchyViolationError  403  parent-scoped write against a foreign account
    AccountAccessError       403  account is neither the caller nor its child
    NotFoundError            404  document does not exist
    NoAssociationError       404  re-association matched no routes
    BackingStoreError        500  document store lookup or write failed
"""


class ProvisionError(Exception):
    """Base class for provisioning errors"""

    status_code = 500
    code = "ProvisionError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class WeakSecretError(ProvisionError):
    status_code = 400
    code = "WeakSecret"


class MissingSecretError(ProvisionError):
    status_code = 400
    code = "MissingSecret"


class ClaimError(ProvisionError):
    status_code = 401
    code = "InvalidClaims"


class HierarchyViolationError(ProvisionError):
    status_code = 403
    code = "HierarchyViolation"


class AccountAccessError(ProvisionError):
    status_code = 403
    code = "AccountAccessDenied"


class NotFoundError(ProvisionError):
    status_code = 404
    code = "NotFound"


class NoAssociationError(ProvisionError):
    status_code = 404
    code = "NoAssociation"


class BackingStoreError(ProvisionError):
    status_code = 500
    code = "BackingStoreError"


class InvalidQueryError(ProvisionError):
    status_code = 400
    code = "InvalidQuery"
