"""
Region ordering and link parsing for cloud accounts.

The remote API accepts region ids as an ordered list but reports the enabled
regions, and the region links pointing at them, in whatever order it likes.
These helpers rebuild the order the user declared.
"""

from collections.abc import Iterable, Mapping, Sequence
from urllib.parse import urlsplit

from cloudaccount.client.protocol import Link
from cloudaccount.errors import MalformedLinkError

REGIONS_REL = "regions"
ASSOCIATED_CLOUD_ACCOUNTS_REL = "associated-cloud-accounts"


def order_by_preference(preferred: Sequence[str], actual: Iterable[str]) -> list[str]:
    """Order `actual` by position in `preferred`.

    Elements missing from `preferred` are appended in their own relative
    order, so nothing in `actual` is dropped. Repeats in `actual` are
    emitted once.
    """
    remaining = dict.fromkeys(actual)
    ordered = [item for item in dict.fromkeys(preferred) if item in remaining]
    for item in ordered:
        del remaining[item]
    return ordered + list(remaining)


def _id_from_href(href: str, collection: str) -> str:
    """Extract the trailing id from a `.../<collection>/<id>` link target."""
    segments = urlsplit(href).path.rstrip("/").split("/")
    if len(segments) < 2 or segments[-2] != collection:
        raise MalformedLinkError(href, f"expected a path ending in /{collection}/<id>")
    if not segments[-1]:
        raise MalformedLinkError(href, "empty identifier")
    return segments[-1]


def parse_region_id(href: str) -> str:
    """Extract the region id from a region link such as /iaas/api/regions/<id>."""
    return _id_from_href(href, "regions")


def region_links(enabled_region_ids: Sequence[str], links: Iterable[Link]) -> dict[str, str]:
    """Pair each enabled region id with its region link target.

    The remote reports both collections in the same (arbitrary) order.
    """
    hrefs = [link.href for link in links if link.rel == REGIONS_REL]
    if len(hrefs) != len(enabled_region_ids):
        raise MalformedLinkError(
            ",".join(hrefs),
            f"{len(hrefs)} region links for {len(enabled_region_ids)} enabled regions",
        )
    return dict(zip(enabled_region_ids, hrefs, strict=True))


def normalize_region_ids(
    declared_order: Sequence[str], remote_links: Mapping[str, str]
) -> list[str]:
    """Return the remote region ids ordered the way the user declared the regions.

    Args:
        declared_order: Region identifiers in the order they were sent.
        remote_links: Enabled region identifier -> region link target, in the
            order the remote returned them.

    Returns:
        Region ids parsed from the links, ordered by the position of their
        region in `declared_order`. Regions the remote reports but the user
        never declared follow in remote order.

    Raises:
        MalformedLinkError: If any link cannot be parsed.
    """
    parsed = {region: parse_region_id(href) for region, href in remote_links.items()}
    return [parsed[region] for region in order_by_preference(declared_order, parsed)]


def associated_cloud_account_ids(links: Iterable[Link]) -> list[str]:
    """Extract associated cloud account ids from relational links."""
    return [
        _id_from_href(link.href, "cloud-accounts")
        for link in links
        if link.rel == ASSOCIATED_CLOUD_ACCOUNTS_REL
    ]
