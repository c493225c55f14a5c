"""SQLAlchemy models for the items feature."""
from __future__ import annotations

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from listing_service.core.database import Base, IntegerPKMixin, TimestampMixin


class ItemOwner(Base, IntegerPKMixin):
    """Owner of at most one item (one-to-one with ``Item.owner``)."""

    __tablename__ = "item_owners"

    name: Mapped[str] = mapped_column(String(200), nullable=False)

    item: Mapped[Item | None] = relationship(back_populates="owner", uselist=False)


class Item(Base, IntegerPKMixin, TimestampMixin):
    """Listable record with sortable/filterable scalar columns and one relation."""

    __tablename__ = "items"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    owner_id: Mapped[int | None] = mapped_column(
        ForeignKey("item_owners.id", ondelete="SET NULL"),
        unique=True,
        nullable=True,
    )

    owner: Mapped[ItemOwner | None] = relationship(back_populates="item", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Item id={self.id} name={self.name!r}>"


__all__ = ["Item", "ItemOwner"]
