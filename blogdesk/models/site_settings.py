from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from blogdesk.db.base import Base


class SiteSettings(Base):
    __tablename__ = "site_settings"

    site_name: Mapped[str] = mapped_column(String(255), nullable=False)
    hero_title: Mapped[str] = mapped_column(String(255), nullable=False)
    hero_description: Mapped[str] = mapped_column(Text, nullable=False)
    logo_url: Mapped[str] = mapped_column(String(512), nullable=False)
    hero_image_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    accent_color: Mapped[str] = mapped_column(String(20), nullable=False)
    gradient_start: Mapped[str] = mapped_column(String(20), nullable=False)
    gradient_end: Mapped[str] = mapped_column(String(20), nullable=False)
