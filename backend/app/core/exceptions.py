"""Error taxonomy shared by the registry, the repository and the HTTP layer."""


class DropTaskError(Exception):
    pass


class ValidationError(DropTaskError):
    """Malformed or missing input."""


class NotFoundOrForbidden(DropTaskError):
    """No record matches both the id and the owner.

    "Does not exist" and "belongs to someone else" are reported identically.
    """


class StoreError(DropTaskError):
    """The underlying database failed."""
