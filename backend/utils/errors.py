# utils/errors.py
# Domain errors raised by repositories and the provisioning hook.
# Routes translate them into HTTPException responses.


class PolicyViolation(Exception):
    """A write was rejected by an authorization policy (no rule grants it)."""

    def __init__(self, table: str, message: str = None):
        self.table = table
        self.message = message or f'new row violates row-level security policy for table "{table}"'
        super().__init__(self.message)


class InvalidRoleError(ValueError):
    """Signup metadata carried a role outside the user_role enumeration."""

    def __init__(self, value):
        self.value = value
        super().__init__(f'invalid input value for enum user_role: "{value}"')


class IdentityExistsError(Exception):
    pass


class ProductUnavailable(Exception):
    """Purchase attempted on a product with no remaining quantity."""


class StorageError(Exception):
    status_code = 400


class BucketNotFound(StorageError):
    status_code = 404


class ObjectNotFound(StorageError):
    status_code = 404


class ObjectExists(StorageError):
    status_code = 409


class InvalidMimeType(StorageError):
    status_code = 415


class ObjectTooLarge(StorageError):
    status_code = 413
