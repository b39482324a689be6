"""Flatten a catalog document into display-ready items.

The projection is the stable base order for every listing: group order, then
product order. Heat is resolved from an external source when one is supplied,
otherwise from the product's stored value. No product is dropped here; status
filtering belongs to `QueryService`.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from core.dates import normalize_date_string, to_sortable_date_value
from core.models import Document, HeatRecord, ProjectedItem
from core.normalizer import merge_shots, normalize_heat, normalize_status

ALL_CATEGORIES = "全部图片"


class ProjectionService:
    """Builds `ProjectedItem` views over a `Document`."""

    def flatten(
        self, document: Document, heat_source: Mapping[str, int] | None = None
    ) -> list[ProjectedItem]:
        """Return one item per product in document order.

        Args:
            document: Canonical document to project.
            heat_source: Optional mapping of product id to heat; wins over the
                heat stored in the document when the id is present.
        """
        items: list[ProjectedItem] = []
        for group in document.groups:
            group_updated_at = normalize_date_string(group.updated_at)
            for product in group.images:
                shots = merge_shots(product.cover_url, product.shots, product.url)
                product_id = str(product.id)
                external = heat_source.get(product_id) if heat_source is not None else None
                items.append(
                    ProjectedItem(
                        id=product_id,
                        name=product.name,
                        category=group.category,
                        uploaded_at=normalize_date_string(
                            product.uploaded_at or group.updated_at or document.updated_at
                        ),
                        heat=(
                            normalize_heat(external)
                            if external is not None
                            else normalize_heat(product.heat)
                        ),
                        cover_url=product.cover_url or product.url or (shots[0] if shots else ""),
                        shots=shots,
                        group_description=group.description,
                        group_updated_at=group_updated_at,
                        status=normalize_status(product.status),
                        description=product.description,
                    )
                )
        return items

    @staticmethod
    def heat_map(records: Iterable[HeatRecord]) -> dict[str, int]:
        """Index heat records by product id; later records win."""
        return {str(r.product_id): normalize_heat(r.heat) for r in records}

    @staticmethod
    def categories(document: Document) -> list[str]:
        """Return the "all" sentinel followed by unique categories in order."""
        seen: dict[str, None] = {}
        for group in document.groups:
            seen.setdefault(group.category, None)
        return [ALL_CATEGORIES, *seen]

    @staticmethod
    def category_summaries(document: Document) -> list[tuple[str, int]]:
        """Return (category, product count) pairs in group order."""
        return [(g.category, len(g.images)) for g in document.groups]

    def find_item(
        self,
        document: Document,
        product_id: str,
        heat_source: Mapping[str, int] | None = None,
    ) -> ProjectedItem | None:
        """Return the projected item for `product_id`, if present."""
        for item in self.flatten(document, heat_source):
            if item.id == product_id:
                return item
        return None

    @staticmethod
    def latest_updated_at(document: Document, items: Iterable[ProjectedItem]) -> str:
        """Return the newest product date, falling back to the document's date."""
        latest: ProjectedItem | None = None
        for item in items:
            if latest is None or to_sortable_date_value(item.uploaded_at) > to_sortable_date_value(
                latest.uploaded_at
            ):
                latest = item
        if latest is not None and latest.uploaded_at:
            return latest.uploaded_at
        return document.updated_at
