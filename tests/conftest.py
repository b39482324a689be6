"""
Pytest fixtures shared by the catalog test suite.

Documents are built from raw JSON-shaped dicts the way they arrive from
storage, then normalized.
"""

import pytest

from core.normalizer import normalize


@pytest.fixture
def today():
    """Fixed "today" in catalog date format."""
    return "2025/03/15"


@pytest.fixture
def clock(today):
    """Clock callable for editors that always returns `today`."""
    return lambda: today


@pytest.fixture
def raw_document():
    """Three categories, five products, mixed statuses and legacy fields."""
    return {
        "updatedAt": "2024-6-1",
        "groups": [
            {
                "category": "Rings",
                "description": "Rings商品",
                "updatedAt": "2024/05/20",
                "images": [
                    {
                        "id": "r1",
                        "name": "Silver ring",
                        "uploadedAt": "2024/01/01",
                        "coverUrl": "/images/r1-cover.png",
                        "shots": ["/images/r1-a.png", "/images/r1-cover.png", "/images/r1-b.png"],
                        "status": "on",
                        "heat": 2,
                    },
                    {
                        "id": "r2",
                        "name": "Gold ring",
                        "uploadedAt": "",
                        "url": "/images/r2-legacy.png",
                        "status": "sold-out",
                        "heat": "5",
                    },
                ],
            },
            {
                "category": "Necklaces",
                "description": "Handmade chains",
                "updatedAt": "2024/04/02",
                "images": [
                    {
                        "id": "n1",
                        "name": "Pearl necklace",
                        "uploadedAt": "2024/3/9",
                        "coverUrl": "/images/n1.png",
                        "shots": [],
                        "status": "off",
                        "heat": -4,
                    },
                ],
            },
            {
                "category": "Earrings",
                "description": "Earrings商品",
                "updatedAt": "2024/02/10",
                "images": [
                    {
                        "id": "e1",
                        "name": "Amber earrings",
                        "uploadedAt": "2024/02/10",
                        "coverUrl": "/images/e1.png",
                        "shots": ["/images/e1.png", "  ", "/images/e1-side.png"],
                        "status": "bogus",
                        "heat": 1.7,
                    },
                    {
                        "id": "e2",
                        "name": "Jade earrings",
                        "uploadedAt": "soon",
                        "coverUrl": "/images/e2.png",
                        "heat": None,
                    },
                ],
            },
        ],
    }


@pytest.fixture
def document(raw_document):
    """Normalized form of `raw_document`."""
    return normalize(raw_document)
