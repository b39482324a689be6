"""Product upsert/move and uniqueness validation.

`upsert` is the central write path for products: it validates the draft,
enforces document-wide id uniqueness, removes the source product from
wherever it lives and inserts the result at the front of the target group.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable
from dataclasses import replace

from loguru import logger

from core.dates import normalize_date_string, today_text
from core.models import PRODUCT_STATUSES, Document, Group, Product, ProductDraft
from core.normalizer import merge_shots, normalize_heat, normalize_status
from core.services.category_service import DEFAULT_DESCRIPTION_TEMPLATE, default_description
from core.services.interfaces import (
    DUPLICATE_CATEGORY,
    DUPLICATE_ID,
    NOT_FOUND,
    VALIDATION_ERROR,
    EditError,
    EditResult,
)


def find_duplicate_ids(document: Document) -> list[str]:
    """Return product ids that occur more than once anywhere in `document`."""
    counts = Counter(p.id for _, p in document.iter_products())
    return [pid for pid, n in counts.items() if n > 1]


def find_duplicate_categories(document: Document) -> list[str]:
    """Return categories that key more than one group."""
    counts = Counter(g.category for g in document.groups)
    return [name for name, n in counts.items() if n > 1]


def validate(document: Document) -> list[EditError]:
    """Linear-scan uniqueness check over the whole document."""
    errors = [
        EditError(DUPLICATE_ID, f"Product id '{pid}' is used more than once.")
        for pid in find_duplicate_ids(document)
    ]
    errors.extend(
        EditError(DUPLICATE_CATEGORY, f"Category '{name}' is used more than once.")
        for name in find_duplicate_categories(document)
    )
    return errors


class ProductService:
    """Create, edit, move and switch status of catalog products."""

    def __init__(
        self,
        description_template: str = DEFAULT_DESCRIPTION_TEMPLATE,
        clock: Callable[[], str] = today_text,
    ) -> None:
        self._template = description_template
        self._clock = clock

    def upsert(
        self,
        document: Document,
        draft: ProductDraft,
        target_category: str,
        source_product_id: str | None = None,
    ) -> EditResult:
        """Insert or update a product and place it first in `target_category`.

        Args:
            document: Current canonical document.
            draft: Raw editor input; text fields are trimmed here.
            target_category: Category the product should live in; created at
                the end of the group sequence when missing.
            source_product_id: Id of the product being edited, if any. The
                draft may carry a different id, which renames the product.
        """
        product_id = (draft.id or "").strip()
        name = (draft.name or "").strip()
        target = (target_category or "").strip()
        source_id = (source_product_id or "").strip() or None
        if not product_id or not name or not target:
            return self._reject(
                document, VALIDATION_ERROR, "Product id, name and category are required."
            )

        for _, existing in document.iter_products():
            if existing.id == product_id and existing.id != source_id:
                return self._reject(
                    document, DUPLICATE_ID, f"Product id '{product_id}' already exists."
                )

        source = document.find_product(source_id) if source_id else None
        if source_id and source is None:
            logger.warning("Upsert source product {} not found; inserting as new", source_id)
        prior_heat = source[1].heat if source else 0

        today = self._clock()
        product = self._build_product(draft, product_id, name, today, prior_heat)

        groups: list[Group] = []
        for group in document.groups:
            if source_id and any(p.id == source_id for p in group.images):
                group = replace(group, images=tuple(p for p in group.images if p.id != source_id))
            groups.append(group)

        for index, group in enumerate(groups):
            if group.category == target:
                rest = tuple(p for p in group.images if p.id != product.id)
                groups[index] = replace(group, updated_at=today, images=(product, *rest))
                break
        else:
            groups.append(
                Group(
                    category=target,
                    description=default_description(target, self._template),
                    updated_at=today,
                    images=(product,),
                )
            )

        logger.info(
            "Product saved: {} in {}{}",
            product.id,
            target,
            f" (from {source_id})" if source_id and source_id != product.id else "",
        )
        return EditResult.success(Document(updated_at=today, groups=tuple(groups)))

    def set_status(self, document: Document, product_id: str, status: str) -> EditResult:
        """Replace only the status of `product_id`, wherever it lives."""
        if status not in PRODUCT_STATUSES:
            return self._reject(document, VALIDATION_ERROR, f"Unknown status '{status}'.")
        if document.find_product(product_id) is None:
            return self._reject(document, NOT_FOUND, f"Product '{product_id}' not found.")

        groups: list[Group] = []
        for group in document.groups:
            if any(p.id == product_id for p in group.images):
                images = tuple(
                    replace(p, status=status) if p.id == product_id else p for p in group.images
                )
                group = replace(group, images=images)
            groups.append(group)
        logger.info("Product status: {} -> {}", product_id, status)
        return EditResult.success(
            replace(document, updated_at=self._clock(), groups=tuple(groups))
        )

    @staticmethod
    def _build_product(
        draft: ProductDraft, product_id: str, name: str, today: str, prior_heat: int
    ) -> Product:
        shots = tuple(s.strip() for s in draft.shots if s and s.strip())
        cover = (draft.cover_url or "").strip() or (shots[0] if shots else "")
        uploaded_at = normalize_date_string((draft.uploaded_at or "").strip()) or today
        return Product(
            id=product_id,
            name=name,
            uploaded_at=uploaded_at,
            cover_url=cover,
            shots=merge_shots(cover, shots),
            description=(draft.description or "").strip(),
            status=normalize_status(draft.status),
            heat=normalize_heat(draft.heat) if draft.heat is not None else prior_heat,
        )

    @staticmethod
    def _reject(document: Document, kind: str, message: str) -> EditResult:
        logger.warning("Product edit rejected ({}): {}", kind, message)
        return EditResult.failure(document, kind, message)
