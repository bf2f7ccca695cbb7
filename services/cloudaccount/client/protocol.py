"""
Remote control-plane client protocol and types.

Defines the CloudAccountClient Protocol that the reconciler drives, along with
the request/response data types and the exceptions a client may raise.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

# --- Data Types ---


@dataclass(frozen=True)
class Tag:
    """A key/value tag attached to a cloud account."""

    key: str
    value: str = ""


@dataclass(frozen=True)
class Link:
    """One flattened hyperlink reference from a remote resource.

    `rel` is the relation type (e.g. "regions", "associated-cloud-accounts")
    and `href` the target path. A relation carrying several targets is
    flattened into one Link per target, preserving the remote order.
    """

    rel: str
    href: str


@dataclass(frozen=True)
class CloudAccountSpec:
    """Request body for registering a vSphere cloud account."""

    name: str
    hostname: str
    username: str
    password: str
    regions: list[str] = field(default_factory=list)
    associated_cloud_account_ids: list[str] = field(default_factory=list)
    accept_self_signed_cert: bool = False
    dcid: str = ""
    description: str = ""
    tags: list[Tag] = field(default_factory=list)


@dataclass(frozen=True)
class UpdateCloudAccountSpec:
    """Request body for updating a vSphere cloud account.

    Only these fields are mutable after registration.
    """

    description: str = ""
    regions: list[str] = field(default_factory=list)
    tags: list[Tag] = field(default_factory=list)


@dataclass(frozen=True)
class CloudAccountState:
    """A vSphere cloud account as reported by the remote API.

    `enabled_region_ids` and the hrefs of the "regions" links are parallel,
    but neither is guaranteed to follow the order of the request.
    `tags` is None when the response did not carry the field at all.
    """

    id: str
    name: str = ""
    hostname: str = ""
    username: str = ""
    dcid: str = ""
    description: str = ""
    enabled_region_ids: list[str] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)
    tags: list[Tag] | None = None
    custom_properties: dict[str, Any] = field(default_factory=dict)
    created_at: str = ""
    updated_at: str = ""
    org_id: str = ""
    owner: str = ""


# --- Exceptions ---


class RemoteAPIError(Exception):
    """Raised for any failure talking to the remote API."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class CloudAccountNotFoundError(RemoteAPIError):
    """Raised when the requested cloud account does not exist remotely."""

    def __init__(self, account_id: str, message: str | None = None) -> None:
        self.account_id = account_id
        super().__init__(message or f"Cloud account not found: {account_id}", status_code=404)


# --- Protocol ---


@runtime_checkable
class CloudAccountClient(Protocol):
    """Protocol defining the remote control-plane interface.

    All methods block until the remote call completes. `timeout` is passed
    straight through to the transport; None means the client default.
    """

    def create(
        self, spec: CloudAccountSpec, timeout: float | None = None
    ) -> CloudAccountState:
        """Register a new cloud account.

        Args:
            spec: Desired account configuration.
            timeout: Request timeout in seconds.

        Returns:
            The created account, including its assigned id.

        Raises:
            RemoteAPIError: If the request fails.
        """
        ...

    def get_by_id(self, account_id: str, timeout: float | None = None) -> CloudAccountState:
        """Fetch a cloud account by id.

        Raises:
            CloudAccountNotFoundError: If no account has this id.
            RemoteAPIError: For any other failure.
        """
        ...

    def update(
        self,
        account_id: str,
        spec: UpdateCloudAccountSpec,
        timeout: float | None = None,
    ) -> CloudAccountState:
        """Update the mutable fields of a cloud account.

        Raises:
            RemoteAPIError: If the request fails.
        """
        ...

    def delete_by_id(self, account_id: str, timeout: float | None = None) -> None:
        """Delete a cloud account by id.

        Raises:
            RemoteAPIError: If the request fails.
        """
        ...

    def close(self) -> None:
        """Release any resources held by the client."""
        ...
