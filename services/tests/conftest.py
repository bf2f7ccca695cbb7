"""
Top-level test configuration for the cloud-account reconciler.
"""

import dataclasses
import os

import pytest

# Ensure test-friendly defaults
os.environ.setdefault("CLOUDACCOUNT_CONFIG_FILE", "/nonexistent/cloudaccount.yaml")
os.environ.setdefault("CLOUDACCOUNT_JSON_LOGS", "false")
os.environ.setdefault("CLOUDACCOUNT_LOG_LEVEL", "DEBUG")

from cloudaccount.client.protocol import (  # noqa: E402
    CloudAccountNotFoundError,
    CloudAccountSpec,
    CloudAccountState,
    Link,
    UpdateCloudAccountSpec,
)


class FakeCloudAccountClient:
    """In-memory CloudAccountClient that records every call.

    Like the real API it reports enabled regions (and their links) in its own
    order, here sorted, regardless of the request order. Set `failures[name]`
    to make the named method raise.
    """

    def __init__(self) -> None:
        self.accounts: dict[str, CloudAccountState] = {}
        self.calls: list[tuple[str, float | None]] = []
        self.failures: dict[str, BaseException] = {}
        self.echo_tags = True
        self._next_id = 0

    def _record(self, name: str, timeout: float | None) -> None:
        self.calls.append((name, timeout))
        if name in self.failures:
            raise self.failures[name]

    @property
    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    @staticmethod
    def region_links(regions: list[str]) -> list[Link]:
        return [Link(rel="regions", href=f"/iaas/api/regions/{r}") for r in regions]

    def set_regions(self, account_id: str, regions: list[str]) -> None:
        """Change the enabled regions out of band."""
        account = self.accounts[account_id]
        other_links = [link for link in account.links if link.rel != "regions"]
        self.accounts[account_id] = dataclasses.replace(
            account,
            enabled_region_ids=sorted(regions),
            links=self.region_links(sorted(regions)) + other_links,
        )

    def create(self, spec: CloudAccountSpec, timeout: float | None = None) -> CloudAccountState:
        self._record("create", timeout)
        self._next_id += 1
        account_id = f"acct-{self._next_id}"
        regions = sorted(spec.regions)
        account = CloudAccountState(
            id=account_id,
            name=spec.name,
            hostname=spec.hostname,
            username=spec.username,
            dcid=spec.dcid,
            description=spec.description,
            enabled_region_ids=regions,
            links=[Link(rel="self", href=f"/iaas/api/cloud-accounts-vsphere/{account_id}")]
            + self.region_links(regions)
            + [
                Link(rel="associated-cloud-accounts", href=f"/iaas/api/cloud-accounts/{a}")
                for a in spec.associated_cloud_account_ids
            ],
            tags=list(spec.tags) if self.echo_tags else None,
            custom_properties={"isExternal": "false"},
            created_at="2024-05-01T10:00:00Z",
            updated_at="2024-05-01T10:00:00Z",
            org_id="org-1",
            owner="admin@example.com",
        )
        self.accounts[account_id] = account
        return account

    def get_by_id(self, account_id: str, timeout: float | None = None) -> CloudAccountState:
        self._record("get_by_id", timeout)
        if account_id not in self.accounts:
            raise CloudAccountNotFoundError(account_id)
        return self.accounts[account_id]

    def update(
        self,
        account_id: str,
        spec: UpdateCloudAccountSpec,
        timeout: float | None = None,
    ) -> CloudAccountState:
        self._record("update", timeout)
        if account_id not in self.accounts:
            raise CloudAccountNotFoundError(account_id)
        self.set_regions(account_id, spec.regions)
        self.accounts[account_id] = dataclasses.replace(
            self.accounts[account_id],
            description=spec.description,
            tags=list(spec.tags) if self.echo_tags else None,
            updated_at="2024-05-02T10:00:00Z",
        )
        return self.accounts[account_id]

    def delete_by_id(self, account_id: str, timeout: float | None = None) -> None:
        self._record("delete_by_id", timeout)
        if account_id not in self.accounts:
            raise CloudAccountNotFoundError(account_id)
        del self.accounts[account_id]

    def close(self) -> None:
        pass


@pytest.fixture
def fake_client() -> FakeCloudAccountClient:
    """An empty in-memory remote."""
    return FakeCloudAccountClient()
