"""
Tests for used/unused asset computation.
"""

from core.models import AssetRecord, ProductDraft
from core.services.asset_usage_service import (
    LIBRARY_SORT_NAME,
    LIBRARY_SORT_OLDEST,
    AssetUsageService,
)
from core.services.category_service import CategoryService
from core.services.product_service import ProductService


def library(*urls):
    return [
        AssetRecord(name=url.rsplit("/", 1)[-1], url=url, modified_at=float(i))
        for i, url in enumerate(urls)
    ]


class TestUsedUrls:
    """Test the used-url union."""

    def test_collects_cover_legacy_and_shots(self, document):
        """Test covers, legacy urls and every shot are used."""
        used = AssetUsageService().used_urls(document)
        assert "/images/r1-cover.png" in used
        assert "/images/r2-legacy.png" in used
        assert "/images/r1-b.png" in used
        assert "/images/e1-side.png" in used
        assert "" not in used

    def test_third_shot_then_removed(self, document):
        """Test a url used only as a third shot becomes unused once dropped."""
        service = AssetUsageService()
        assets = library("/images/r1-b.png", "/images/orphan.png")
        assert [a.url for a in service.unused_assets(assets, document)] == ["/images/orphan.png"]

        draft = ProductDraft(
            id="r1",
            name="Silver ring",
            cover_url="/images/r1-cover.png",
            shots=("/images/r1-a.png",),
        )
        edited = ProductService().upsert(document, draft, "Rings", source_product_id="r1").document
        unused = [a.url for a in service.unused_assets(assets, edited)]
        assert "/images/r1-b.png" in unused

    def test_deleting_category_frees_assets(self, document):
        """Test assets of a deleted category report as unused."""
        service = AssetUsageService()
        after = CategoryService().delete(document, "Necklaces").document
        assert service.is_used(document, "/images/n1.png")
        assert not service.is_used(after, "/images/n1.png")


class TestLibraryViews:
    """Test unused listings and the picker view."""

    def test_unused_newest_first_and_search(self, document):
        """Test unused assets are newest first and filterable."""
        assets = library("/images/old-a.png", "/images/e1.png", "/images/new-b.png")
        service = AssetUsageService()
        assert [a.url for a in service.unused_assets(assets, document)] == [
            "/images/new-b.png",
            "/images/old-a.png",
        ]
        assert [a.url for a in service.unused_assets(assets, document, "OLD")] == [
            "/images/old-a.png"
        ]

    def test_browse_hides_used_except_selected(self, document):
        """Test the picker hides taken assets unless they are selected."""
        assets = library("/images/e1.png", "/images/free.png", "/images/n1.png")
        service = AssetUsageService()
        listed = service.browse(assets, document, selected_urls=["/images/n1.png"])
        assert [a.url for a in listed] == ["/images/n1.png", "/images/free.png"]

    def test_browse_show_all_and_sorts(self, document):
        """Test show_all lists everything in the chosen order."""
        assets = library("/images/b.png", "/images/e1.png", "/images/A.png")
        service = AssetUsageService()
        oldest = service.browse(assets, document, show_all=True, sort_mode=LIBRARY_SORT_OLDEST)
        assert [a.url for a in oldest] == ["/images/b.png", "/images/e1.png", "/images/A.png"]
        by_name = service.browse(assets, document, show_all=True, sort_mode=LIBRARY_SORT_NAME)
        assert [a.name for a in by_name] == ["A.png", "b.png", "e1.png"]

    def test_browse_name_sort_uses_pinyin(self, document):
        """Test the picker name sort orders Han file names by reading."""
        assets = library("/images/茶.png", "/images/吧.png", "/images/啊.png")
        listed = AssetUsageService().browse(
            assets, document, show_all=True, sort_mode=LIBRARY_SORT_NAME
        )
        assert [a.name for a in listed] == ["啊.png", "吧.png", "茶.png"]
