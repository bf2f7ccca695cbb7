"""Tests for region ordering and link parsing."""

from itertools import permutations

import pytest

from cloudaccount.client.protocol import Link
from cloudaccount.errors import MalformedLinkError
from cloudaccount.regions import (
    associated_cloud_account_ids,
    normalize_region_ids,
    order_by_preference,
    parse_region_id,
    region_links,
)


def links_for(regions):
    return {r: f"/iaas/api/regions/{r}" for r in regions}


class TestOrderByPreference:
    def test_follows_preferred_order(self):
        assert order_by_preference(["c", "a", "b"], ["a", "b", "c"]) == ["c", "a", "b"]

    def test_extras_appended_in_actual_order(self):
        assert order_by_preference(["b", "a"], ["z", "a", "y", "b"]) == ["b", "a", "z", "y"]

    def test_missing_preferred_skipped(self):
        assert order_by_preference(["a", "b", "c"], ["c", "a"]) == ["a", "c"]

    def test_repeats_emitted_once(self):
        assert order_by_preference(["a"], ["b", "a", "b"]) == ["a", "b"]

    def test_empty_preference_keeps_actual(self):
        assert order_by_preference([], ["b", "a"]) == ["b", "a"]


class TestNormalizeRegionIds:
    def test_declared_order_wins(self):
        remote = {"r1": "/iaas/api/regions/r1", "r2": "/iaas/api/regions/r2"}
        assert normalize_region_ids(["r2", "r1"], remote) == ["r2", "r1"]

    def test_order_invariant_over_remote_permutations(self):
        declared = ["r3", "r1", "r4", "r2"]
        for remote_order in permutations(declared):
            assert normalize_region_ids(declared, links_for(remote_order)) == declared

    def test_remote_extra_region_appended(self):
        remote = links_for(["rx", "r1", "r2"])
        assert normalize_region_ids(["r2", "r1"], remote) == ["r2", "r1", "rx"]

    def test_idempotent(self):
        declared = ["r2", "r9", "r1"]
        once = normalize_region_ids(declared, links_for(["r1", "r5", "r2", "r3"]))
        twice = normalize_region_ids(declared, links_for(once))
        assert once == twice == ["r2", "r1", "r5", "r3"]

    def test_returns_ids_from_links(self):
        # Enabled region ids are vCenter datacenter refs; links carry region ids
        remote = {
            "Datacenter:datacenter-3": "/iaas/api/regions/5a1c",
            "Datacenter:datacenter-2": "/iaas/api/regions/9e0f",
        }
        declared = ["Datacenter:datacenter-2", "Datacenter:datacenter-3"]
        assert normalize_region_ids(declared, remote) == ["9e0f", "5a1c"]

    def test_malformed_link_raises(self):
        remote = {"r1": "/iaas/api/regions/r1", "r2": "/iaas/api/zones/r2"}
        with pytest.raises(MalformedLinkError) as exc_info:
            normalize_region_ids(["r1", "r2"], remote)
        assert exc_info.value.href == "/iaas/api/zones/r2"

    def test_empty(self):
        assert normalize_region_ids(["r1"], {}) == []


class TestParseRegionId:
    def test_relative_path(self):
        assert parse_region_id("/iaas/api/regions/abc-123") == "abc-123"

    def test_absolute_url(self):
        assert parse_region_id("https://vra.example.com/iaas/api/regions/abc?x=1") == "abc"

    def test_trailing_slash(self):
        assert parse_region_id("/iaas/api/regions/abc/") == "abc"

    def test_wrong_collection(self):
        with pytest.raises(MalformedLinkError):
            parse_region_id("/iaas/api/zones/abc")

    def test_missing_id(self):
        with pytest.raises(MalformedLinkError):
            parse_region_id("/iaas/api/regions/")

    def test_empty(self):
        with pytest.raises(MalformedLinkError):
            parse_region_id("")


class TestRegionLinks:
    def test_pairs_positionally(self):
        links = [
            Link(rel="self", href="/iaas/api/cloud-accounts-vsphere/a1"),
            Link(rel="regions", href="/iaas/api/regions/x"),
            Link(rel="regions", href="/iaas/api/regions/y"),
        ]
        assert region_links(["dc-1", "dc-2"], links) == {
            "dc-1": "/iaas/api/regions/x",
            "dc-2": "/iaas/api/regions/y",
        }

    def test_count_mismatch_raises(self):
        links = [Link(rel="regions", href="/iaas/api/regions/x")]
        with pytest.raises(MalformedLinkError):
            region_links(["dc-1", "dc-2"], links)


class TestAssociatedCloudAccountIds:
    def test_filters_by_relation(self):
        links = [
            Link(rel="self", href="/iaas/api/cloud-accounts-vsphere/a1"),
            Link(rel="associated-cloud-accounts", href="/iaas/api/cloud-accounts/nsx-1"),
            Link(rel="regions", href="/iaas/api/regions/r1"),
            Link(rel="associated-cloud-accounts", href="/iaas/api/cloud-accounts/nsx-2"),
        ]
        assert associated_cloud_account_ids(links) == ["nsx-1", "nsx-2"]

    def test_none(self):
        assert associated_cloud_account_ids([Link(rel="self", href="/x")]) == []

    def test_malformed(self):
        links = [Link(rel="associated-cloud-accounts", href="/iaas/api/regions/r1")]
        with pytest.raises(MalformedLinkError):
            associated_cloud_account_ids(links)
