"""Core service interfaces and shared data structures.

This module defines the result dataclasses returned by the editors, the delete
planning structures used by the asset store, and the protocols the engine
expects from its persistence and heat-ledger collaborators.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from core.models import Document, HeatRecord

VALIDATION_ERROR = "ValidationError"
DUPLICATE_ID = "DuplicateId"
DUPLICATE_CATEGORY = "DuplicateCategory"
NOT_FOUND = "NotFound"


@dataclass(frozen=True)
class EditError:
    """Why an edit was rejected.

    Attributes:
        kind: One of VALIDATION_ERROR, DUPLICATE_ID, DUPLICATE_CATEGORY, NOT_FOUND.
        message: Human-readable reason suitable for an admin UI.
    """

    kind: str
    message: str


@dataclass(frozen=True)
class EditResult:
    """Outcome of an editor operation.

    Attributes:
        document: The new document on success, the untouched input on failure.
        error: Set when the edit was rejected.
        removed_count: Products removed by the edit (category delete).
    """

    document: Document
    error: EditError | None = None
    removed_count: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, document: Document, removed_count: int = 0) -> EditResult:
        return cls(document=document, removed_count=removed_count)

    @classmethod
    def failure(cls, document: Document, kind: str, message: str) -> EditResult:
        return cls(document=document, error=EditError(kind=kind, message=message))


@dataclass
class DeleteResult:
    """Outcome of an asset delete operation.

    Attributes:
        success_urls: Asset URLs successfully deleted.
        failed: Tuples of (url, reason) for failures.
        log_path: Optional path to the audit log file.
    """

    success_urls: list[str]
    failed: list[tuple[str, str]]
    log_path: str | None = None


@dataclass
class AssetDeletePlan:
    """Planned asset delete.

    Attributes:
        delete_urls: URLs chosen for deletion (already filtered to unused assets).
        skipped_in_use: URLs requested but still referenced by the document.
    """

    delete_urls: list[str]
    skipped_in_use: list[str]


class DocumentRepository(Protocol):
    """Persistence collaborator: whole-document get/replace."""

    def load(self) -> Any | None:
        """Return the raw stored document, or None when nothing is stored."""
        raise NotImplementedError

    def replace(self, document: Document) -> None:
        """Replace the stored document wholesale; raise on I/O failure."""
        raise NotImplementedError


class HeatLedger(Protocol):
    """Counter store for product heat."""

    def get_all(self) -> list[HeatRecord]:
        """Return every stored heat record."""
        raise NotImplementedError

    def increment(self, product_id: str) -> bool:
        """Add one to `product_id`'s heat, creating the record when missing."""
        raise NotImplementedError


class OverrideRepository(DocumentRepository, Protocol):
    """Second persistence tier layered over a base document."""

    def clear(self) -> None:
        """Remove the stored override so the base document applies again."""
        raise NotImplementedError
