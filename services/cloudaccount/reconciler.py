"""Lifecycle reconciler for a single vSphere cloud account.

Drives create / read / update / delete / import against the remote API and
keeps the local record consistent with what the remote reports. One
reconciler manages one account; the orchestration host serializes calls.

A failed operation leaves the held record exactly as it was before the call,
with one exception: a read that finds the account gone clears the record and
returns normally, since that is how out-of-band deletion is detected.
"""

from cloudaccount.client.protocol import (
    CloudAccountClient,
    CloudAccountNotFoundError,
    CloudAccountState,
)
from cloudaccount.config import settings
from cloudaccount.errors import ImportNotFoundError, LifecycleError
from cloudaccount.logging_config import get_logger
from cloudaccount.models import CloudAccountConfig, CloudAccountRecord, LifecycleState
from cloudaccount.regions import (
    associated_cloud_account_ids,
    normalize_region_ids,
    order_by_preference,
    region_links,
)
from cloudaccount.validation import ensure_unique

logger = get_logger(__name__)

_TRANSITIONS: dict[LifecycleState, frozenset[LifecycleState]] = {
    LifecycleState.ABSENT: frozenset({LifecycleState.CREATING, LifecycleState.PRESENT}),
    LifecycleState.CREATING: frozenset({LifecycleState.PRESENT, LifecycleState.ABSENT}),
    LifecycleState.PRESENT: frozenset(
        {LifecycleState.PRESENT, LifecycleState.DELETING, LifecycleState.ABSENT}
    ),
    LifecycleState.DELETING: frozenset({LifecycleState.ABSENT, LifecycleState.PRESENT}),
}


class CloudAccountReconciler:
    """Reconciles one cloud account between the local record and the remote API."""

    def __init__(
        self,
        client: CloudAccountClient,
        record: CloudAccountRecord | None = None,
        request_timeout: float | None = None,
        create_timeout: float | None = None,
    ) -> None:
        self._client = client
        self.record = record or CloudAccountRecord()
        self._request_timeout = (
            request_timeout
            if request_timeout is not None
            else settings.api.request_timeout_seconds
        )
        self._create_timeout = (
            create_timeout if create_timeout is not None else settings.api.create_timeout_seconds
        )

    @property
    def state(self) -> LifecycleState:
        return self.record.state

    def _require(self, state: LifecycleState, operation: str) -> None:
        if self.record.state != state:
            raise LifecycleError(
                f"Cannot {operation} cloud account in state {self.record.state}"
            )

    def _transition(
        self, new_state: LifecycleState, record: CloudAccountRecord | None = None
    ) -> None:
        current = self.record.state
        if new_state not in _TRANSITIONS[current]:
            raise LifecycleError(f"Invalid lifecycle transition {current} -> {new_state}")
        base = record if record is not None else self.record
        self.record = base.model_copy(update={"state": new_state})
        if current != new_state:
            logger.debug(
                "Lifecycle transition",
                account_id=self.record.id,
                from_state=str(current),
                to_state=str(new_state),
            )

    def _refreshed(
        self, remote: CloudAccountState, declared: CloudAccountRecord
    ) -> CloudAccountRecord:
        """Merge a remote account into the declared record.

        Echoed attributes take the remote value so drift shows up. The
        password and accept_self_signed_cert are never returned and keep
        their declared values. Regions keep the declared order.
        """
        region_ids = normalize_region_ids(
            declared.regions, region_links(remote.enabled_region_ids, remote.links)
        )
        return declared.model_copy(
            update={
                "id": remote.id,
                "name": remote.name,
                "hostname": remote.hostname,
                "username": remote.username,
                "dcid": remote.dcid,
                "description": remote.description,
                "regions": order_by_preference(declared.regions, remote.enabled_region_ids),
                "region_ids": region_ids,
                "associated_cloud_account_ids": associated_cloud_account_ids(remote.links),
                "tags": list(remote.tags) if remote.tags is not None else declared.tags,
                "created_at": remote.created_at,
                "updated_at": remote.updated_at,
                "org_id": remote.org_id,
                "owner": remote.owner,
                "custom_properties": dict(remote.custom_properties),
                "links": list(remote.links),
            }
        )

    def _fetch(self, declared: CloudAccountRecord, timeout: float | None) -> CloudAccountRecord:
        remote = self._client.get_by_id(
            declared.id, timeout=timeout if timeout is not None else self._request_timeout
        )
        return self._refreshed(remote, declared)

    def create(
        self, config: CloudAccountConfig, timeout: float | None = None
    ) -> CloudAccountRecord:
        """Register the account remotely, then read it back.

        Input is validated before any remote call. If the create request
        fails the reconciler stays absent and nothing is recorded.
        """
        self._require(LifecycleState.ABSENT, "create")
        ensure_unique(config.regions, "regions")
        ensure_unique(config.associated_cloud_account_ids, "associated_cloud_account_ids")

        previous = self.record
        self._transition(LifecycleState.CREATING, CloudAccountRecord.from_config(config))
        try:
            created = self._client.create(
                config.to_spec(),
                timeout=timeout if timeout is not None else self._create_timeout,
            )
            region_ids = normalize_region_ids(
                config.regions, region_links(created.enabled_region_ids, created.links)
            )
        except BaseException:
            self._transition(LifecycleState.ABSENT, previous)
            logger.warning("Cloud account create failed", name=config.name)
            raise

        self._transition(
            LifecycleState.PRESENT,
            self.record.model_copy(
                update={"id": created.id, "region_ids": region_ids, "tags": list(config.tags)}
            ),
        )
        logger.info("Cloud account created", account_id=created.id, name=config.name)
        return self.read(timeout)

    def read(self, timeout: float | None = None) -> CloudAccountRecord:
        """Refresh the record from the remote.

        A missing remote account is not an error: the record is cleared and
        the reconciler becomes absent.
        """
        self._require(LifecycleState.PRESENT, "read")
        account_id = self.record.id
        try:
            record = self._fetch(self.record, timeout)
        except CloudAccountNotFoundError:
            logger.warning("Cloud account no longer exists remotely", account_id=account_id)
            self._transition(LifecycleState.ABSENT, CloudAccountRecord())
            return self.record

        self._transition(LifecycleState.PRESENT, record)
        return self.record

    def update(
        self, config: CloudAccountConfig, timeout: float | None = None
    ) -> CloudAccountRecord:
        """Send the mutable fields (description, regions, tags), then read back."""
        self._require(LifecycleState.PRESENT, "update")
        ensure_unique(config.regions, "regions")

        account_id = self.record.id
        self._client.update(
            account_id,
            config.to_update_spec(),
            timeout=timeout if timeout is not None else self._request_timeout,
        )
        self.record = self.record.model_copy(
            update={
                "description": config.description,
                "regions": list(config.regions),
                "tags": list(config.tags),
            }
        )
        logger.info("Cloud account updated", account_id=account_id)
        return self.read(timeout)

    def delete(self, timeout: float | None = None) -> CloudAccountRecord:
        """Delete the remote account and clear the record.

        On failure the record is kept as it was; the remote account is
        presumed to still exist.
        """
        self._require(LifecycleState.PRESENT, "delete")
        previous = self.record
        self._transition(LifecycleState.DELETING)
        try:
            self._client.delete_by_id(
                previous.id,
                timeout=timeout if timeout is not None else self._request_timeout,
            )
        except BaseException:
            self._transition(LifecycleState.PRESENT, previous)
            logger.warning("Cloud account delete failed", account_id=previous.id)
            raise

        self._transition(LifecycleState.ABSENT, CloudAccountRecord())
        logger.info("Cloud account deleted", account_id=previous.id)
        return self.record

    def import_(self, account_id: str, timeout: float | None = None) -> CloudAccountRecord:
        """Adopt an existing remote account by id.

        Unlike read(), a missing account is an error here.
        """
        self._require(LifecycleState.ABSENT, "import")
        try:
            record = self._fetch(CloudAccountRecord(id=account_id), timeout)
        except CloudAccountNotFoundError as e:
            raise ImportNotFoundError(account_id) from e

        self._transition(LifecycleState.PRESENT, record)
        logger.info("Cloud account imported", account_id=account_id)
        return self.record
