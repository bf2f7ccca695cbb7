"""
Exceptions raised by the reconciler and its helpers.

Remote failures live in cloudaccount.client.protocol; everything here is
detected locally.
"""

from collections.abc import Iterable

from cloudaccount.client.protocol import CloudAccountNotFoundError


class CloudAccountError(Exception):
    """Base exception for locally detected cloud-account failures."""


class ValidationError(CloudAccountError):
    """Raised when user input is rejected before any remote call."""


class DuplicateValueError(ValidationError):
    """Raised when a set-valued field contains repeated values."""

    def __init__(self, field: str, duplicates: Iterable[str]) -> None:
        self.field = field
        self.duplicates = sorted(set(duplicates))
        super().__init__(
            f"specified {field} are not unique: {', '.join(self.duplicates)}"
        )


class MalformedLinkError(CloudAccountError):
    """Raised when a link from the remote cannot be parsed into an identifier."""

    def __init__(self, href: str, reason: str) -> None:
        self.href = href
        super().__init__(f"Malformed link {href!r}: {reason}")


class LifecycleError(CloudAccountError):
    """Raised when an operation is not allowed in the current lifecycle state."""


class ImportNotFoundError(CloudAccountNotFoundError):
    """Raised when importing an id that does not exist remotely."""

    def __init__(self, account_id: str) -> None:
        super().__init__(account_id, f"Cannot import cloud account {account_id}: not found")
