"""Which library assets are referenced by the catalog.

The service holds no state: callers must recompute usage right before acting
on a delete so that a stale snapshot never authorizes removing an image that
a product started referencing in the meantime.
"""

from __future__ import annotations

from collections.abc import Iterable

from core.models import AssetRecord, Document
from core.services.query_service import name_key

LIBRARY_SORT_NEWEST = "newest"
LIBRARY_SORT_OLDEST = "oldest"
LIBRARY_SORT_NAME = "name"


class AssetUsageService:
    """Computes used/unused asset URLs over a `Document`."""

    def used_urls(self, document: Document) -> set[str]:
        """Union of every cover, legacy url and shot across all products."""
        used: set[str] = set()
        for _, product in document.iter_products():
            if product.cover_url:
                used.add(product.cover_url)
            if product.url:
                used.add(product.url)
            used.update(shot for shot in product.shots if shot)
        return used

    def is_used(self, document: Document, url: str) -> bool:
        return url in self.used_urls(document)

    def unused_assets(
        self, assets: Iterable[AssetRecord], document: Document, search_text: str = ""
    ) -> list[AssetRecord]:
        """Return library assets no product references, newest first."""
        used = self.used_urls(document)
        query = search_text.strip().casefold()
        candidates = [a for a in assets if a.url not in used and _matches(a, query)]
        return sorted(candidates, key=lambda a: a.modified_at, reverse=True)

    def browse(
        self,
        assets: Iterable[AssetRecord],
        document: Document,
        search_text: str = "",
        sort_mode: str = LIBRARY_SORT_NEWEST,
        show_all: bool = False,
        selected_urls: Iterable[str] = (),
    ) -> list[AssetRecord]:
        """Library listing for an image picker.

        Args:
            assets: Stored assets as enumerated by the asset store.
            document: Document used to decide which assets are taken.
            search_text: Case-insensitive filter on asset name or url.
            sort_mode: `newest`, `oldest` or `name`.
            show_all: Include assets already used by products.
            selected_urls: URLs picked in the current form; always listed.
        """
        used = set() if show_all else self.used_urls(document)
        selected = set(selected_urls)
        query = search_text.strip().casefold()
        listed = [
            a
            for a in assets
            if (a.url not in used or a.url in selected) and _matches(a, query)
        ]
        if sort_mode == LIBRARY_SORT_NAME:
            return sorted(listed, key=lambda a: name_key(a.name))
        return sorted(
            listed, key=lambda a: a.modified_at, reverse=sort_mode != LIBRARY_SORT_OLDEST
        )


def _matches(asset: AssetRecord, query: str) -> bool:
    if not query:
        return True
    return query in asset.name.casefold() or query in asset.url.casefold()
