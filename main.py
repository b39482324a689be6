from __future__ import annotations

from pathlib import Path

from loguru import logger

from app.viewmodels.gallery_vm import GalleryVM
from core.services.category_service import DEFAULT_DESCRIPTION_TEMPLATE, CategoryService
from core.services.product_service import ProductService, validate
from core.services.query_service import DEFAULT_SORT_MODE
from infrastructure.asset_store import DEFAULT_URL_PREFIX, LocalAssetStore
from infrastructure.heat_ledger import JsonHeatLedger
from infrastructure.json_repository import JsonGalleryRepository
from infrastructure.logging import find_latest_log_file, init_logging
from infrastructure.settings import JsonSettings

BASE_DIR = Path(__file__).parent


def build_vm(settings: JsonSettings) -> GalleryVM:
    """Wire repositories and services from `settings`."""
    document_path = settings.get_path("storage.document_path", "data/gallery.json")
    override_path = settings.get_path("storage.override_path")
    heat_path = settings.get_path("storage.heat_path", "data/heat.json")
    template = settings.get_str("gallery.description_template", DEFAULT_DESCRIPTION_TEMPLATE)

    return GalleryVM(
        repo=JsonGalleryRepository(document_path),
        heat_ledger=JsonHeatLedger(heat_path) if heat_path else None,
        override_repo=JsonGalleryRepository(override_path) if override_path else None,
        categories=CategoryService(description_template=template),
        products=ProductService(description_template=template),
        default_sort=settings.get_str("gallery.default_sort", DEFAULT_SORT_MODE),
    )


def build_asset_store(settings: JsonSettings) -> LocalAssetStore:
    root = settings.get_path("assets.root_dir", "public/images")
    prefix = settings.get_str("assets.url_prefix", DEFAULT_URL_PREFIX)
    return LocalAssetStore(root, url_prefix=prefix)


def main() -> int:
    settings = JsonSettings(BASE_DIR / "settings.json")
    log_dir = init_logging(
        settings.get_path("logging.dir"), level=settings.get_str("logging.level", "INFO")
    )
    logger.info("Logging to {}", find_latest_log_file(log_dir) or log_dir)

    vm = build_vm(settings)
    vm.load()

    for error in validate(vm.document):
        logger.warning("Catalog check: {}", error.message)

    for category, count in vm.category_summaries():
        logger.info("Category {}: {} products", category, count)

    store = build_asset_store(settings)
    unused = vm.unused_assets(store.list_assets())
    logger.info("Unused assets: {}", len(unused))
    for asset in unused:
        logger.info("Unused asset: {}", asset.url)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
