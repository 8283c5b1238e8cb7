"""Platform association manifests for app-claimed universal links."""

from typing import Any

from deeplink_router.core.app_config import ConfigTable

ANDROID_HANDLE_ALL_URLS = "delegate_permission/common.handle_all_urls"
ANDROID_NAMESPACE = "android_app"


def build_apple_association(table: ConfigTable) -> dict[str, Any]:
    """Build the apple-app-site-association document.

    Applications without iOS metadata are left out.
    """
    details = [
        {
            "appIDs": [app.ios.app_identifier],
            "components": [{"/": path} for path in app.ios.paths],
        }
        for app in table.apps
        if app.ios is not None
    ]
    return {"applinks": {"apps": [], "details": details}}


def build_android_association(table: ConfigTable) -> list[dict[str, Any]]:
    """Build the Digital Asset Links statements for assetlinks.json."""
    return [
        {
            "relation": [ANDROID_HANDLE_ALL_URLS],
            "target": {
                "namespace": ANDROID_NAMESPACE,
                "package_name": app.android.package,
                "sha256_cert_fingerprints": list(app.android.sha256_cert_fingerprints),
            },
        }
        for app in table.apps
        if app.android is not None
    ]
