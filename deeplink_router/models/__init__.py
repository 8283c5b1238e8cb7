"""SQLAlchemy models.

All models should be imported here for Alembic to detect them.
"""

from deeplink_router.core.database import Base
from deeplink_router.models.deep_link import DeepLink, DeepLinkClick

__all__ = ["Base", "DeepLink", "DeepLinkClick"]
