"""vRA IaaS API client for vSphere cloud accounts.

Blocking httpx implementation of CloudAccountClient. Handles bearer token
acquisition and the mapping between the local request/response types and the
camelCase JSON of /iaas/api/cloud-accounts-vsphere.
"""

from typing import Any

import httpx

from cloudaccount.client.protocol import (
    CloudAccountNotFoundError,
    CloudAccountSpec,
    CloudAccountState,
    Link,
    RemoteAPIError,
    Tag,
    UpdateCloudAccountSpec,
)
from cloudaccount.logging_config import get_logger

logger = get_logger(__name__)

CLOUD_ACCOUNTS_VSPHERE_PATH = "/iaas/api/cloud-accounts-vsphere"
LOGIN_PATH = "/iaas/api/login"


# --- Field mapping ---


def _tags_to_json(tags: list[Tag]) -> list[dict[str, str]]:
    return [{"key": t.key, "value": t.value} for t in tags]


def _tags_from_json(data: list[dict[str, Any]] | None) -> list[Tag] | None:
    if data is None:
        return None
    return [Tag(key=t["key"], value=t.get("value") or "") for t in data]


def flatten_links(data: dict[str, Any] | None) -> list[Link]:
    """Flatten a `_links` map into Link entries.

    Each relation holds either a single `href` or a list of `hrefs`.
    """
    links: list[Link] = []
    for rel, ref in (data or {}).items():
        if ref.get("href"):
            links.append(Link(rel=rel, href=ref["href"]))
        for href in ref.get("hrefs") or []:
            links.append(Link(rel=rel, href=href))
    return links


def spec_to_json(spec: CloudAccountSpec) -> dict[str, Any]:
    """Build the create request body."""
    return {
        "name": spec.name,
        "hostName": spec.hostname,
        "username": spec.username,
        "password": spec.password,
        "acceptSelfSignedCertificate": spec.accept_self_signed_cert,
        "associatedCloudAccountIds": list(spec.associated_cloud_account_ids),
        "createDefaultZones": False,
        "dcid": spec.dcid,
        "description": spec.description,
        "regionIds": list(spec.regions),
        "tags": _tags_to_json(spec.tags),
    }


def update_spec_to_json(spec: UpdateCloudAccountSpec) -> dict[str, Any]:
    """Build the update request body."""
    return {
        "createDefaultZones": False,
        "description": spec.description,
        "regionIds": list(spec.regions),
        "tags": _tags_to_json(spec.tags),
    }


def state_from_json(data: dict[str, Any]) -> CloudAccountState:
    """Parse a CloudAccountVsphere response body."""
    return CloudAccountState(
        id=data["id"],
        name=data.get("name") or "",
        hostname=data.get("hostName") or "",
        username=data.get("username") or "",
        dcid=data.get("dcid") or "",
        description=data.get("description") or "",
        enabled_region_ids=list(data.get("enabledRegionIds") or []),
        links=flatten_links(data.get("_links")),
        tags=_tags_from_json(data.get("tags")),
        custom_properties=dict(data.get("customProperties") or {}),
        created_at=data.get("createdAt") or "",
        updated_at=data.get("updatedAt") or "",
        org_id=data.get("orgId") or "",
        owner=data.get("owner") or "",
    )


# --- Client ---


class VraCloudAccountClient:
    """CloudAccountClient backed by the vRA IaaS REST API."""

    def __init__(
        self,
        base_url: str,
        api_version: str,
        access_token: str = "",
        refresh_token: str = "",
        verify_tls: bool = True,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not access_token and not refresh_token:
            raise ValueError("Either access_token or refresh_token must be configured")
        self._api_version = api_version
        self._access_token = access_token
        self._refresh_token = refresh_token
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            verify=verify_tls,
            timeout=timeout,
            transport=transport,
        )

    def _token(self) -> str:
        """Return the bearer token, exchanging the refresh token on first use."""
        if self._access_token:
            return self._access_token

        try:
            resp = self._client.post(
                LOGIN_PATH,
                params={"apiVersion": self._api_version},
                json={"refreshToken": self._refresh_token},
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RemoteAPIError(
                f"Login failed: HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise RemoteAPIError(f"Login failed: {e}") from e

        try:
            self._access_token = resp.json()["token"]
        except (ValueError, KeyError, TypeError) as e:
            raise RemoteAPIError(f"Login failed: unexpected response body: {e}") from e
        logger.debug("vRA bearer token obtained")
        return self._access_token

    def _request(
        self,
        method: str,
        path: str,
        timeout: float | None,
        json: dict[str, Any] | None = None,
        account_id: str | None = None,
    ) -> httpx.Response:
        try:
            resp = self._client.request(
                method,
                path,
                params={"apiVersion": self._api_version},
                json=json,
                headers={"Authorization": f"Bearer {self._token()}"},
                timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
            )
        except httpx.HTTPError as e:
            raise RemoteAPIError(f"{method} {path} failed: {e}") from e

        if resp.status_code == 404 and account_id is not None:
            raise CloudAccountNotFoundError(account_id)
        if resp.is_error:
            raise RemoteAPIError(
                f"{method} {path} failed: HTTP {resp.status_code}: {resp.text}",
                status_code=resp.status_code,
            )
        return resp

    def _state(self, resp: httpx.Response) -> CloudAccountState:
        """Decode a cloud account response body."""
        try:
            return state_from_json(resp.json())
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise RemoteAPIError(
                f"Unexpected response body: {e}",
                status_code=resp.status_code,
            ) from e

    def create(
        self, spec: CloudAccountSpec, timeout: float | None = None
    ) -> CloudAccountState:
        resp = self._request("POST", CLOUD_ACCOUNTS_VSPHERE_PATH, timeout, json=spec_to_json(spec))
        return self._state(resp)

    def get_by_id(self, account_id: str, timeout: float | None = None) -> CloudAccountState:
        resp = self._request(
            "GET", f"{CLOUD_ACCOUNTS_VSPHERE_PATH}/{account_id}", timeout, account_id=account_id
        )
        return self._state(resp)

    def update(
        self,
        account_id: str,
        spec: UpdateCloudAccountSpec,
        timeout: float | None = None,
    ) -> CloudAccountState:
        resp = self._request(
            "PATCH",
            f"{CLOUD_ACCOUNTS_VSPHERE_PATH}/{account_id}",
            timeout,
            json=update_spec_to_json(spec),
            account_id=account_id,
        )
        return self._state(resp)

    def delete_by_id(self, account_id: str, timeout: float | None = None) -> None:
        self._request(
            "DELETE", f"{CLOUD_ACCOUNTS_VSPHERE_PATH}/{account_id}", timeout, account_id=account_id
        )

    def close(self) -> None:
        self._client.close()
