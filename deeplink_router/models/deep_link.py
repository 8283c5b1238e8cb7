"""Deep link SQLAlchemy models."""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, BigInteger, Boolean, DateTime, ForeignKey, Integer, String, Text, Uuid, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from deeplink_router.core.database import Base


class DeepLink(Base):
    """A short link slug mapped to an app route and its parameters."""

    __tablename__ = "deep_links"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    slug: Mapped[str] = mapped_column(
        String(32),
        unique=True,
        nullable=False,
        index=True,
        comment="Random URL-safe identifier used in /s/{slug}",
    )
    app_id: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
        comment="Application id from the routing table (not enforced)",
    )
    route: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="/",
    )
    params: Mapped[dict[str, Any]] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"),
        nullable=False,
        default=dict,
        comment="Route parameters, string keys to string values",
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    clicks: Mapped[list["DeepLinkClick"]] = relationship(
        back_populates="deep_link",
        order_by="DeepLinkClick.id",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<DeepLink {self.slug} -> {self.app_id}{self.route}>"


class DeepLinkClick(Base):
    """One resolution of a short link.

    Rows are only ever inserted; the autoincrement id gives append order.
    """

    __tablename__ = "deep_link_clicks"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    deep_link_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("deep_links.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    clicked_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )
    ip_address: Mapped[str | None] = mapped_column(
        String(45),
        nullable=True,
    )
    user_agent: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Raw User-Agent header, 'unknown' when absent",
    )

    deep_link: Mapped[DeepLink] = relationship(back_populates="clicks")

    def __repr__(self) -> str:
        return f"<DeepLinkClick {self.id} link={self.deep_link_id} at={self.clicked_at}>"
