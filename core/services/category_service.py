"""Structural edits on the ordered sequence of catalog groups.

Every operation takes a `Document` and returns an `EditResult`; the input is
never modified. Only the touched group is rebuilt, other groups are shared
with the input document.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace

from loguru import logger

from core.dates import today_text
from core.models import Document, Group
from core.services.interfaces import (
    DUPLICATE_CATEGORY,
    NOT_FOUND,
    VALIDATION_ERROR,
    EditResult,
)

DEFAULT_DESCRIPTION_TEMPLATE = "{category}商品"


def default_description(category: str, template: str = DEFAULT_DESCRIPTION_TEMPLATE) -> str:
    """Auto-generated description for a category."""
    return template.format(category=category)


def _index_of(document: Document, category: str) -> int:
    for index, group in enumerate(document.groups):
        if group.category == category:
            return index
    return -1


class CategoryService:
    """Add, rename, delete and reorder catalog categories."""

    def __init__(
        self,
        description_template: str = DEFAULT_DESCRIPTION_TEMPLATE,
        clock: Callable[[], str] = today_text,
    ) -> None:
        """Create a CategoryService.

        Args:
            description_template: Format string with a `{category}` field used
                for auto-generated group descriptions.
            clock: Returns today's date in catalog format.
        """
        self._template = description_template
        self._clock = clock

    def default_description(self, category: str) -> str:
        return default_description(category, self._template)

    def add(self, document: Document, name: str, description: str | None = None) -> EditResult:
        """Prepend a new empty group named `name`."""
        name = (name or "").strip()
        if not name:
            return self._reject(document, VALIDATION_ERROR, "Category name is required.")
        if _index_of(document, name) >= 0:
            return self._reject(document, DUPLICATE_CATEGORY, f"Category '{name}' already exists.")

        today = self._clock()
        text = (description or "").strip() or self.default_description(name)
        group = Group(category=name, description=text, updated_at=today, images=())
        logger.info("Category added: {}", name)
        return EditResult.success(
            replace(document, updated_at=today, groups=(group, *document.groups))
        )

    def rename(self, document: Document, old_name: str, new_name: str) -> EditResult:
        """Rename `old_name` to `new_name` keeping the group's position.

        A description equal to the auto-generated default for the old name is
        regenerated for the new name; custom descriptions are kept.
        """
        new_name = (new_name or "").strip()
        if not new_name:
            return self._reject(document, VALIDATION_ERROR, "New category name is required.")
        index = _index_of(document, old_name)
        if index < 0:
            return self._reject(document, NOT_FOUND, f"Category '{old_name}' not found.")
        if new_name == old_name:
            return EditResult.success(document)
        if _index_of(document, new_name) >= 0:
            return self._reject(
                document, DUPLICATE_CATEGORY, f"Category '{new_name}' already exists."
            )

        today = self._clock()
        group = document.groups[index]
        description = group.description
        if description == self.default_description(old_name):
            description = self.default_description(new_name)
        groups = list(document.groups)
        groups[index] = replace(group, category=new_name, description=description, updated_at=today)
        logger.info("Category renamed: {} -> {}", old_name, new_name)
        return EditResult.success(replace(document, updated_at=today, groups=tuple(groups)))

    def delete(self, document: Document, name: str) -> EditResult:
        """Remove the group `name` and all of its products.

        The result's `removed_count` reports how many products went with it.
        """
        index = _index_of(document, name)
        if index < 0:
            return self._reject(document, NOT_FOUND, f"Category '{name}' not found.")

        removed = len(document.groups[index].images)
        groups = document.groups[:index] + document.groups[index + 1 :]
        logger.info("Category deleted: {} ({} products removed)", name, removed)
        return EditResult.success(
            replace(document, updated_at=self._clock(), groups=groups), removed_count=removed
        )

    def reorder(self, document: Document, name: str, to_index: int) -> EditResult:
        """Move group `name` to position `to_index`, shifting the others."""
        index = _index_of(document, name)
        if index < 0:
            return self._reject(document, NOT_FOUND, f"Category '{name}' not found.")
        if not 0 <= to_index < len(document.groups):
            return self._reject(document, NOT_FOUND, f"Position {to_index} is out of range.")
        if index == to_index:
            return EditResult.success(document)

        groups = list(document.groups)
        moving = groups.pop(index)
        groups.insert(to_index, moving)
        logger.info("Category moved: {} {} -> {}", name, index, to_index)
        return EditResult.success(
            replace(document, updated_at=self._clock(), groups=tuple(groups))
        )

    @staticmethod
    def _reject(document: Document, kind: str, message: str) -> EditResult:
        logger.warning("Category edit rejected ({}): {}", kind, message)
        return EditResult.failure(document, kind, message)
