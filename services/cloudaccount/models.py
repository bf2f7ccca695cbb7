"""
Local data model for vSphere cloud accounts.

CloudAccountConfig is what the orchestration host wants to exist;
CloudAccountRecord is the local declarative record kept in step with the
remote object.
"""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from cloudaccount.client.protocol import (
    CloudAccountSpec,
    Link,
    Tag,
    UpdateCloudAccountSpec,
)


class LifecycleState(StrEnum):
    """Lifecycle states of a managed cloud account."""

    ABSENT = "absent"
    CREATING = "creating"
    PRESENT = "present"
    DELETING = "deleting"


class CloudAccountConfig(BaseModel):
    """Desired configuration of a vSphere cloud account."""

    name: str
    hostname: str
    username: str
    password: str = Field(repr=False)
    regions: list[str] = Field(description="Region ids in the order the user declared them")
    associated_cloud_account_ids: list[str] = Field(default_factory=list)
    accept_self_signed_cert: bool = False
    dcid: str = ""
    description: str = ""
    tags: list[Tag] = Field(default_factory=list)

    def to_spec(self) -> CloudAccountSpec:
        return CloudAccountSpec(
            name=self.name,
            hostname=self.hostname,
            username=self.username,
            password=self.password,
            regions=list(self.regions),
            associated_cloud_account_ids=list(self.associated_cloud_account_ids),
            accept_self_signed_cert=self.accept_self_signed_cert,
            dcid=self.dcid,
            description=self.description,
            tags=list(self.tags),
        )

    def to_update_spec(self) -> UpdateCloudAccountSpec:
        return UpdateCloudAccountSpec(
            description=self.description,
            regions=list(self.regions),
            tags=list(self.tags),
        )


class CloudAccountRecord(BaseModel):
    """Local record of a managed vSphere cloud account.

    An empty `id` means the account does not exist remotely (never created,
    deleted, or removed out of band).
    """

    id: str = ""
    state: LifecycleState = LifecycleState.ABSENT

    # Declared
    name: str = ""
    hostname: str = ""
    username: str = ""
    password: str = Field(default="", repr=False)
    regions: list[str] = Field(default_factory=list)
    associated_cloud_account_ids: list[str] = Field(default_factory=list)
    accept_self_signed_cert: bool = False
    dcid: str = ""
    description: str = ""
    tags: list[Tag] = Field(default_factory=list)

    # Computed
    region_ids: list[str] = Field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""
    org_id: str = ""
    owner: str = ""
    custom_properties: dict[str, Any] = Field(default_factory=dict)
    links: list[Link] = Field(default_factory=list)

    @classmethod
    def from_config(cls, config: CloudAccountConfig) -> "CloudAccountRecord":
        """Build a not-yet-created record from desired configuration."""
        return cls(**config.model_dump())
