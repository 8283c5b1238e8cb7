"""Errors raised by the deep link services."""


class DeepLinkError(Exception):
    """Base class for all deep link errors."""


class ConfigTableError(DeepLinkError):
    """The application routing table could not be loaded."""


class InvalidApplicationError(DeepLinkError):
    """Link generation was requested for an unknown application."""

    def __init__(self, app_id: str | None) -> None:
        super().__init__(f"Unknown application: {app_id!r}")
        self.app_id = app_id


class LinkNotFoundError(DeepLinkError):
    """No active deep link exists for the requested slug."""

    def __init__(self, slug: str) -> None:
        super().__init__(f"No active deep link for slug {slug!r}")
        self.slug = slug


class PersistenceError(DeepLinkError):
    """The link store failed to read or write."""


class LinkPersistError(DeepLinkError):
    """A short link could not be saved."""


class ResolutionError(DeepLinkError):
    """A short link was found but could not be resolved."""
