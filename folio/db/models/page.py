from datetime import datetime

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from folio.db.base import Base


class Page(Base):
    """One personal page: a freely edited draft and a published snapshot."""

    __tablename__ = "pages"

    # Owner identity comes from the auth collaborator; one page per owner
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    # Public identifier used by visitors
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)

    # Stored verbatim as JSON documents (see folio.document.models.PageConfig)
    draft_config: Mapped[dict | None] = mapped_column(JSON(none_as_null=True), nullable=True)
    published_config: Mapped[dict | None] = mapped_column(JSON(none_as_null=True), nullable=True)

    draft_saved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
