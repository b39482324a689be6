"""Core domain models for the gallery document, its groups and products."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

STATUS_ON = "on"
STATUS_OFF = "off"
STATUS_SOLD_OUT = "sold-out"
PRODUCT_STATUSES: tuple[str, ...] = (STATUS_ON, STATUS_OFF, STATUS_SOLD_OUT)


@dataclass(frozen=True)
class Product:
    """A single catalog entry (one gallery image set)."""

    id: str
    name: str
    uploaded_at: str
    cover_url: str = ""
    shots: tuple[str, ...] = ()
    description: str | None = None
    status: str = STATUS_ON
    heat: int = 0
    # Legacy single-image field kept for documents written before `shots`
    url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON shape used by the persistence collaborator."""
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "uploadedAt": self.uploaded_at,
            "coverUrl": self.cover_url,
            "shots": list(self.shots),
        }
        if self.description is not None:
            data["description"] = self.description
        if self.url is not None:
            data["url"] = self.url
        data["status"] = self.status
        data["heat"] = self.heat
        return data


@dataclass(frozen=True)
class Group:
    """A category and its ordered products."""

    category: str
    description: str = ""
    updated_at: str = ""
    images: tuple[Product, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "description": self.description,
            "updatedAt": self.updated_at,
            "images": [p.to_dict() for p in self.images],
        }


@dataclass(frozen=True)
class Document:
    """The whole catalog."""

    updated_at: str = ""
    groups: tuple[Group, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "updatedAt": self.updated_at,
            "groups": [g.to_dict() for g in self.groups],
        }

    def find_group(self, category: str) -> Group | None:
        """Return the group keyed by `category`, if any."""
        for group in self.groups:
            if group.category == category:
                return group
        return None

    def iter_products(self) -> Iterator[tuple[Group, Product]]:
        """Yield (group, product) pairs in document order."""
        for group in self.groups:
            for product in group.images:
                yield group, product

    def find_product(self, product_id: str) -> tuple[Group, Product] | None:
        """Return (owning group, product) for `product_id`, searching every group."""
        for group, product in self.iter_products():
            if product.id == product_id:
                return group, product
        return None

    @property
    def product_count(self) -> int:
        return sum(len(g.images) for g in self.groups)


EMPTY_DOCUMENT = Document()


@dataclass(frozen=True)
class HeatRecord:
    """Popularity counter for one product, stored outside the document."""

    product_id: str
    heat: int = 0


@dataclass(frozen=True)
class ProjectedItem:
    """Read-only, display-ready product flattened with its group fields."""

    id: str
    name: str
    category: str
    uploaded_at: str
    heat: int
    cover_url: str
    shots: tuple[str, ...]
    group_description: str
    group_updated_at: str
    status: str = STATUS_ON
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "uploadedAt": self.uploaded_at,
            "heat": self.heat,
            "coverUrl": self.cover_url,
            "shots": list(self.shots),
            "groupDescription": self.group_description,
            "groupUpdatedAt": self.group_updated_at,
            "status": self.status,
        }
        if self.description is not None:
            data["description"] = self.description
        return data


@dataclass(frozen=True)
class AssetRecord:
    """A stored image file, independent of whether any product references it."""

    name: str
    url: str
    modified_at: float = 0.0


@dataclass(frozen=True)
class ProductDraft:
    """Raw editor input for a product; text fields are trimmed on upsert.

    `heat` is None unless the caller explicitly overrides the stored value.
    """

    id: str
    name: str
    uploaded_at: str = ""
    cover_url: str = ""
    shots: tuple[str, ...] = ()
    description: str = ""
    status: str = STATUS_ON
    heat: int | None = None
