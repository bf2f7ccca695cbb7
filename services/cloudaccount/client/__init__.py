"""
Remote control-plane client for cloud accounts.

build_client() constructs the configured client. The caller owns the returned
handle, injects it into a reconciler, and closes it when done.
"""

from __future__ import annotations

from cloudaccount.client.protocol import CloudAccountClient
from cloudaccount.config import APIConfig, settings
from cloudaccount.logging_config import get_logger

logger = get_logger(__name__)


def build_client(cfg: APIConfig | None = None) -> CloudAccountClient:
    """Create a vRA client from configuration.

    Falls back to the global settings when no config is given.
    """
    from cloudaccount.client.vra import VraCloudAccountClient

    cfg = cfg or settings.api
    client = VraCloudAccountClient(
        base_url=cfg.url,
        api_version=cfg.api_version,
        access_token=cfg.access_token,
        refresh_token=cfg.refresh_token,
        verify_tls=cfg.verify_tls,
        timeout=cfg.request_timeout_seconds,
    )
    logger.info("Cloud account client initialized", url=cfg.url, api_version=cfg.api_version)
    return client
