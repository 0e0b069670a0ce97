class DomainError(Exception):
    """Base class for all domain-level errors."""

    pass


class ValidationError(DomainError):
    """A request field is missing or has the wrong type."""

    pass


class UnsupportedOperation(DomainError):
    """The provider does not implement the requested operation."""

    pass


class IdentityStoreError(DomainError):
    """The identity store failed to create or update a record."""

    pass


class IdentityNotFound(IdentityStoreError):
    """No identity matches the entity id for this provider."""

    pass
