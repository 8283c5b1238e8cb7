"""Per-application routing table loaded from a JSON file at startup.

Example document::

    {
      "domain": "links.acme.com",
      "defaultFallback": "https://acme.com",
      "apps": [
        {
          "appId": "acmeApp",
          "fallbackUrl": "https://acme.com/app",
          "ios": {"teamId": "T1", "bundleId": "com.acme.app", "paths": ["/u/*"]},
          "android": {"package": "com.acme.app", "sha256CertFingerprints": ["AB:CD"]}
        }
      ]
    }
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from deeplink_router.services.exceptions import ConfigTableError


class _FrozenModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class IosMetadata(_FrozenModel):
    """Apple team/bundle identifiers and the paths the app claims."""

    team_id: str
    bundle_id: str
    paths: tuple[str, ...] = ()

    @property
    def app_identifier(self) -> str:
        return f"{self.team_id}.{self.bundle_id}"


class AndroidMetadata(_FrozenModel):
    """Android package name and signing certificate fingerprints."""

    package: str
    sha256_cert_fingerprints: tuple[str, ...] = ()


class ApplicationDescriptor(_FrozenModel):
    """Routing and platform metadata for one application."""

    app_id: str = Field(min_length=1)
    default_route: str = "/"
    fallback_url: str
    ios: IosMetadata | None = None
    android: AndroidMetadata | None = None


class ConfigTable(_FrozenModel):
    """Immutable table of application descriptors keyed by app id."""

    domain: str
    default_fallback: str
    apps: tuple[ApplicationDescriptor, ...] = ()

    _by_id: dict[str, ApplicationDescriptor] = PrivateAttr(default_factory=dict)

    @model_validator(mode="after")
    def _check_unique_app_ids(self) -> "ConfigTable":
        seen: set[str] = set()
        for app in self.apps:
            if app.app_id in seen:
                raise ValueError(f"Duplicate appId {app.app_id!r}")
            seen.add(app.app_id)
        return self

    def model_post_init(self, __context: object) -> None:
        self._by_id = {app.app_id: app for app in self.apps}

    def get(self, app_id: str | None) -> ApplicationDescriptor | None:
        """Get the descriptor for an app id, or None if unknown."""
        return self._by_id.get(app_id)

    def fallback_for(self, app_id: str) -> str:
        """Fallback base URL for an app, or the global default."""
        app = self.get(app_id)
        return app.fallback_url if app else self.default_fallback


def load_config_table(path: Path) -> ConfigTable:
    """Load and validate the routing table from a JSON file.

    Raises ConfigTableError if the file is missing or malformed.
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigTableError(f"Cannot read app config {path}: {e}") from e

    try:
        return ConfigTable.model_validate_json(raw)
    except ValidationError as e:
        raise ConfigTableError(f"Invalid app config {path}: {e}") from e
