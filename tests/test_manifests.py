"""Tests for the Apple and Android association manifests."""

from deeplink_router.core.app_config import ConfigTable
from deeplink_router.services.manifests import build_android_association, build_apple_association


def test_apple_association_documented_example():
    table = ConfigTable.model_validate({
        "domain": "links.test",
        "defaultFallback": "https://www.acme.test",
        "apps": [
            {
                "appId": "acmeApp",
                "fallbackUrl": "https://acme.test",
                "ios": {"teamId": "T1", "bundleId": "com.acme.app", "paths": ["/product/*"]},
            }
        ],
    })

    assert build_apple_association(table) == {
        "applinks": {
            "apps": [],
            "details": [{"appIDs": ["T1.com.acme.app"], "components": [{"/": "/product/*"}]}],
        }
    }


def test_apple_association_skips_apps_without_ios(config_table):
    details = build_apple_association(config_table)["applinks"]["details"]
    assert [d["appIDs"] for d in details] == [["T1.com.acme.app"]]


def test_android_association(config_table):
    assert build_android_association(config_table) == [
        {
            "relation": ["delegate_permission/common.handle_all_urls"],
            "target": {
                "namespace": "android_app",
                "package_name": "com.acme.app",
                "sha256_cert_fingerprints": ["AA:BB", "CC:DD"],
            },
        },
        {
            "relation": ["delegate_permission/common.handle_all_urls"],
            "target": {
                "namespace": "android_app",
                "package_name": "com.shop.app",
                "sha256_cert_fingerprints": ["EE:FF"],
            },
        },
    ]


def test_manifests_for_empty_table():
    table = ConfigTable(domain="links.test", default_fallback="https://www.acme.test")
    assert build_apple_association(table) == {"applinks": {"apps": [], "details": []}}
    assert build_android_association(table) == []
