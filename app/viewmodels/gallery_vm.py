"""ViewModel holding the canonical catalog and persisting edits."""

from __future__ import annotations

from loguru import logger

from core.models import EMPTY_DOCUMENT, AssetRecord, Document, ProductDraft, ProjectedItem
from core.normalizer import resolve
from core.services.asset_usage_service import AssetUsageService
from core.services.category_service import CategoryService
from core.services.interfaces import (
    DocumentRepository,
    EditError,
    EditResult,
    HeatLedger,
    OverrideRepository,
)
from core.services.product_service import ProductService
from core.services.projection_service import ProjectionService
from core.services.query_service import (
    DEFAULT_SORT_MODE,
    PUBLIC_EXCLUDED_STATUSES,
    QueryOptions,
    QueryService,
    parse_sort_mode,
)


class CatalogEditError(Exception):
    """An edit was rejected; the catalog was left unchanged."""

    def __init__(self, error: EditError) -> None:
        super().__init__(error.message)
        self.error = error

    @property
    def kind(self) -> str:
        return self.error.kind


class GalleryVM:
    """Main catalog view-model.

    Mediates between the persistence collaborators and the pure catalog
    services. Every successful edit is saved with exactly one `replace`.
    I/O errors from the collaborators propagate unchanged.
    """

    def __init__(
        self,
        repo: DocumentRepository,
        heat_ledger: HeatLedger | None = None,
        override_repo: OverrideRepository | None = None,
        categories: CategoryService | None = None,
        products: ProductService | None = None,
        default_sort: str = DEFAULT_SORT_MODE,
    ) -> None:
        """Create a GalleryVM.

        Args:
            repo: Repository with `load()` and `replace(document)`.
            heat_ledger: Optional external heat counters merged into listings.
            override_repo: Optional override tier. When present its document
                takes precedence over `repo` at load time and edits are saved
                to it, leaving `repo` as the read-only base.
            categories: Category editor (defaults to `CategoryService`).
            products: Product editor (defaults to `ProductService`).
            default_sort: Sort mode used when a listing does not give one.
        """
        self._repo = repo
        self._heat = heat_ledger
        self._override_repo = override_repo
        self._writer = override_repo if override_repo is not None else repo
        self._categories = categories or CategoryService()
        self._products = products or ProductService()
        self._projector = ProjectionService()
        self._query = QueryService()
        self._usage = AssetUsageService()
        self._default_sort = parse_sort_mode(default_sort)
        self.document: Document = EMPTY_DOCUMENT

    def load(self) -> Document:
        """Load and normalize the stored document (override first, then base)."""
        base = self._repo.load()
        override = self._override_repo.load() if self._override_repo is not None else None
        self.document = resolve(base, override)
        logger.info(
            "Catalog loaded: {} groups, {} products",
            len(self.document.groups),
            self.document.product_count,
        )
        return self.document

    # Listings

    def _heat_source(self) -> dict[str, int] | None:
        if self._heat is None:
            return None
        return self._projector.heat_map(self._heat.get_all())

    def items(self) -> list[ProjectedItem]:
        """Projection in document order with external heat merged in."""
        return self._projector.flatten(self.document, self._heat_source())

    def public_items(
        self, category: str | None = None, search_text: str = "", sort_mode: str | None = None
    ) -> list[ProjectedItem]:
        """Storefront listing: hides products switched off."""
        options = QueryOptions(
            category=category,
            search_text=search_text,
            exclude_statuses=PUBLIC_EXCLUDED_STATUSES,
            sort_mode=parse_sort_mode(sort_mode or self._default_sort),
        )
        return self._query.query(self.items(), options)

    def admin_items(
        self, category: str | None = None, search_text: str = ""
    ) -> list[ProjectedItem]:
        """Admin listing: every status, document order, matches names and ids."""
        options = QueryOptions(category=category, search_text=search_text, search_ids=True)
        return self._query.filter(self.items(), options)

    def categories(self) -> list[str]:
        return self._projector.categories(self.document)

    def category_summaries(self) -> list[tuple[str, int]]:
        return self._projector.category_summaries(self.document)

    def find_item(self, product_id: str) -> ProjectedItem | None:
        return self._projector.find_item(self.document, product_id, self._heat_source())

    # Edits

    def add_category(self, name: str, description: str | None = None) -> Document:
        return self._commit(self._categories.add(self.document, name, description))

    def rename_category(self, old_name: str, new_name: str) -> Document:
        return self._commit(self._categories.rename(self.document, old_name, new_name))

    def delete_category(self, name: str) -> int:
        """Delete a category; returns how many products were removed with it."""
        result = self._categories.delete(self.document, name)
        self._commit(result)
        return result.removed_count

    def move_category(self, name: str, to_index: int) -> Document:
        return self._commit(self._categories.reorder(self.document, name, to_index))

    def save_product(
        self, draft: ProductDraft, target_category: str, source_product_id: str | None = None
    ) -> Document:
        return self._commit(
            self._products.upsert(self.document, draft, target_category, source_product_id)
        )

    def set_product_status(self, product_id: str, status: str) -> Document:
        return self._commit(self._products.set_status(self.document, product_id, status))

    def reset(self) -> Document:
        """Drop local edits.

        With an override tier the override is cleared and the base document is
        reloaded; otherwise the stored catalog is replaced by an empty one.
        """
        if self._override_repo is not None:
            self._override_repo.clear()
            logger.info("Catalog override cleared")
            return self.load()
        self._repo.replace(EMPTY_DOCUMENT)
        self.document = EMPTY_DOCUMENT
        logger.info("Catalog reset to empty document")
        return self.document

    def record_view(self, product_id: str) -> bool:
        """Increment a product's heat in the external ledger."""
        if self._heat is None:
            logger.warning("No heat ledger configured; view of {} not recorded", product_id)
            return False
        return self._heat.increment(product_id)

    # Assets

    def used_urls(self) -> set[str]:
        return self._usage.used_urls(self.document)

    def unused_assets(self, assets: list[AssetRecord], search_text: str = "") -> list[AssetRecord]:
        return self._usage.unused_assets(assets, self.document, search_text)

    def _commit(self, result: EditResult) -> Document:
        if result.error is not None:
            raise CatalogEditError(result.error)
        if result.document is not self.document:
            self._writer.replace(result.document)
            self.document = result.document
        return self.document
