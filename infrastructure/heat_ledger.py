"""Counter-style heat ledger stored beside the catalog document.

The ledger is a JSON object mapping product id to heat. Incrementing an id
that has no record yet creates it with heat 1; the ledger does not consult
the catalog document.
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from core.models import HeatRecord
from core.normalizer import normalize_heat
from infrastructure.json_repository import read_json, write_json_atomic


class JsonHeatLedger:
    """Heat counters persisted in a JSON file."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def _read(self) -> dict[str, int]:
        raw = read_json(self._path)
        if not isinstance(raw, dict):
            if raw is not None:
                logger.warning("Heat ledger {} is not an object; treating as empty", self._path)
            return {}
        return {str(k): normalize_heat(v) for k, v in raw.items()}

    def get_all(self) -> list[HeatRecord]:
        """Return every stored heat record."""
        return [HeatRecord(product_id=k, heat=v) for k, v in self._read().items()]

    def increment(self, product_id: str) -> bool:
        """Add one to `product_id`'s heat; False when the id is blank."""
        product_id = (product_id or "").strip()
        if not product_id:
            logger.warning("Heat increment without product id")
            return False
        counters = self._read()
        counters[product_id] = counters.get(product_id, 0) + 1
        write_json_atomic(self._path, counters)
        logger.debug("Heat {} -> {}", product_id, counters[product_id])
        return True
