"""Local image library: enumeration and safe deletion of unused assets.

Assets are image files under a root directory, addressed by URL
(`/images/<relative path>`). Deletion is planned against the current catalog
document so that referenced assets are skipped, then executed by moving files
to the recycle bin, while writing an audit CSV log.
"""

from __future__ import annotations

from collections.abc import Iterable
import csv
from datetime import datetime
import os
from pathlib import Path

from loguru import logger
from send2trash import send2trash

from core.models import AssetRecord, Document
from core.services.asset_usage_service import AssetUsageService
from core.services.interfaces import AssetDeletePlan, DeleteResult
from infrastructure.logging import get_delete_log_directory

IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".webp", ".gif", ".bmp", ".avif"})
DEFAULT_URL_PREFIX = "/images/"


class LocalAssetStore:
    """Enumerates and deletes image assets stored under `root_dir`."""

    def __init__(
        self,
        root_dir: str | Path,
        url_prefix: str = DEFAULT_URL_PREFIX,
        usage: AssetUsageService | None = None,
    ) -> None:
        self._root = Path(root_dir)
        self._prefix = url_prefix if url_prefix.endswith("/") else url_prefix + "/"
        self._usage = usage or AssetUsageService()

    @property
    def root_dir(self) -> Path:
        return self._root

    def list_assets(self) -> list[AssetRecord]:
        """Return every image file under the root, newest first."""
        if not self._root.is_dir():
            logger.info("Asset root does not exist: {}", self._root)
            return []
        items: list[AssetRecord] = []
        for dirpath, _dirnames, filenames in os.walk(self._root):
            for filename in filenames:
                if Path(filename).suffix.lower() not in IMAGE_EXTENSIONS:
                    continue
                absolute = Path(dirpath) / filename
                try:
                    modified_at = absolute.stat().st_mtime
                except OSError as ex:
                    logger.warning("stat failed for {}: {}", absolute, ex)
                    continue
                relative = absolute.relative_to(self._root).as_posix()
                items.append(
                    AssetRecord(name=filename, url=self._prefix + relative, modified_at=modified_at)
                )
        items.sort(key=lambda a: a.modified_at, reverse=True)
        return items

    def resolve_path(self, url: str) -> Path:
        """Map an asset URL to its file path.

        Raises:
            ValueError: The URL is not under the asset prefix or escapes the root.
        """
        if not url.startswith(self._prefix):
            raise ValueError(f"Not an asset url: {url}")
        root = self._root.resolve()
        target = (root / url[len(self._prefix) :]).resolve()
        if target == root or root not in target.parents:
            raise ValueError(f"Asset url escapes the library root: {url}")
        return target

    def plan_delete(self, document: Document, urls: Iterable[str]) -> AssetDeletePlan:
        """Compute a delete plan, skipping assets the document still references."""
        used = self._usage.used_urls(document)
        delete_urls: list[str] = []
        skipped: list[str] = []
        for url in dict.fromkeys(urls):
            (skipped if url in used else delete_urls).append(url)
        if skipped:
            logger.info("Skipping {} assets still in use", len(skipped))
        return AssetDeletePlan(delete_urls=delete_urls, skipped_in_use=skipped)

    def delete_to_recycle(self, urls: list[str]) -> DeleteResult:
        """Send asset files to the recycle bin and report per-url results."""
        success: list[str] = []
        failed: list[tuple[str, str]] = []
        for url in urls:
            try:
                path = self.resolve_path(url)
            except ValueError as ex:
                logger.error("Refusing to delete {}: {}", url, ex)
                failed.append((url, str(ex)))
                continue

            if not path.exists():
                logger.error("Asset does not exist: {}", path)
                failed.append((url, "File does not exist"))
                continue

            try:
                send2trash(str(path))
                success.append(url)
            except OSError as ex:
                logger.error("Delete failed for {}: {}", path, ex)
                failed.append((url, f"Delete failed: {ex}"))
        return DeleteResult(success_urls=success, failed=failed)

    def execute_delete(self, plan: AssetDeletePlan, log_dir: str | None = None) -> DeleteResult:
        """Execute the delete plan and write an audit CSV log.

        Args:
            plan: The delete plan produced by `plan_delete`.
            log_dir: Optional directory for the audit log; defaults to
                `get_delete_log_directory()`.
        """
        result = self.delete_to_recycle(plan.delete_urls)
        try:
            base_dir = Path(log_dir) if log_dir else Path(get_delete_log_directory())
            base_dir.mkdir(parents=True, exist_ok=True)
            ts = datetime.now().strftime("%Y%m%d_%H%M%S")
            log_path = base_dir / f"delete_{ts}.csv"
            with log_path.open("w", encoding="utf-8", newline="") as f:
                writer = csv.writer(f)
                writer.writerow(["Url", "Success", "Reason"])
                for url in result.success_urls:
                    writer.writerow([url, 1, ""])
                for url, reason in result.failed:
                    writer.writerow([url, 0, reason])
                for url in plan.skipped_in_use:
                    writer.writerow([url, 0, "In use"])
            result.log_path = str(log_path)
            logger.info(
                "Delete log written: {} ({} success, {} failed, {} in use)",
                log_path,
                len(result.success_urls),
                len(result.failed),
                len(plan.skipped_in_use),
            )
        except (OSError, ValueError) as ex:
            logger.error("Write delete log failed: {}", ex)
        return result

    def delete_unused(
        self, document: Document, urls: Iterable[str], log_dir: str | None = None
    ) -> DeleteResult:
        """Plan against `document` and delete only the unreferenced assets."""
        return self.execute_delete(self.plan_delete(document, urls), log_dir=log_dir)
