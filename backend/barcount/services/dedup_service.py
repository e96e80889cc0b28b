"""Product duplicate resolution.

Two checks live here:

- ``dedupe_products_by_name`` collapses catalog entries that are the same
  product (same normalized name and bottle volume) into one representative.
- ``find_similar_product`` is the softer check run before saving a new
  product: it also catches typos ("Jamesn" vs "Jameson") while letting
  genuinely different products with a shared word through.
"""

import logging
import re
from datetime import datetime
from difflib import SequenceMatcher
from typing import Dict, List, Optional, Tuple

from barcount.core.numbers import round_half_up, to_number_or_default
from barcount.schemas.product import Product

logger = logging.getLogger(__name__)

# "Jameson 700 ml", "Jameson 0.7 л", "Jameson 0,7l"
_VOLUME_SUFFIX = re.compile(
    r"\s*\(?\s*\d+(?:[.,]\d+)?\s*(?:ml|мл|cl|l|л)\.?\s*\)?\s*$",
    re.IGNORECASE,
)
_NON_WORD = re.compile(r"[^\w\s]", re.UNICODE)


def normalize_product_name(name: Optional[str]) -> str:
    """Lowercase, collapse whitespace runs to one space, trim."""
    return " ".join((name or "").split()).lower()


def _volume_key(bottle_volume_ml: float) -> int:
    # Thousandths of a ml, so float noise in a volume does not split a group
    return round_half_up(to_number_or_default(bottle_volume_ml) * 1000)


def _rank(product: Product) -> Tuple[int, int, float]:
    updated = product.updated_at
    return (
        1 if product.is_active else 0,
        1 if updated is not None else 0,
        updated.timestamp() if isinstance(updated, datetime) else 0.0,
    )


def dedupe_products_by_name(products: List[Product]) -> List[Product]:
    """
    One product per (normalized name, bottle volume).

    Within a group the kept product is the active one, then the most recently
    updated (no timestamp counts as oldest), then the first seen. Output keeps
    the order in which each group first appears.
    """
    best: Dict[Tuple[str, int], Product] = {}
    order: List[Tuple[str, int]] = []

    for product in products:
        key = (normalize_product_name(product.name), _volume_key(product.bottle_volume_ml))
        current = best.get(key)
        if current is None:
            best[key] = product
            order.append(key)
        elif _rank(product) > _rank(current):
            best[key] = product

    if len(order) < len(products):
        logger.debug(f"Collapsed {len(products) - len(order)} duplicate products")

    return [best[key] for key in order]


# ==================== Fuzzy duplicate check ====================

def _comparable_name(name: str) -> str:
    base = _VOLUME_SUFFIX.sub("", name or "")
    return normalize_product_name(_NON_WORD.sub("", base))


def _is_substring_match(a: str, b: str) -> bool:
    """One name contains the other with a real length difference ("cinzano" / "cinzano rosso")."""
    if not a or not b or abs(len(a) - len(b)) < 3:
        return False
    return a in b or b in a


def _has_counterpart(word: str, words: List[str]) -> bool:
    return any(SequenceMatcher(None, word, other).ratio() >= 0.8 for other in words)


def _has_significant_difference(a: str, b: str) -> bool:
    """A word longer than 3 characters in one name has no close match in the other.

    "rosso" vs "rosato" is a different word; "jamesn" vs "jameson" is a typo.
    """
    words_a = [w for w in a.split() if len(w) > 2]
    words_b = [w for w in b.split() if len(w) > 2]
    unmatched = [w for w in words_a if not _has_counterpart(w, words_b)]
    unmatched += [w for w in words_b if not _has_counterpart(w, words_a)]
    return any(len(w) > 3 for w in unmatched)


def _adaptive_threshold(a: str, b: str, base: float) -> float:
    shortest = min(len(a), len(b))
    if shortest < 10:
        return max(base, 0.90)
    if shortest < 20:
        return base
    return max(base - 0.02, 0.80)


def find_similar_product(
    name: str,
    existing: List[Product],
    threshold: float = 0.85,
    bottle_volume_ml: Optional[float] = None,
) -> Optional[Product]:
    """
    Return the existing product a new ``name`` most likely duplicates, or None.

    Args:
        name: Name of the product about to be saved (may include a volume).
        existing: Catalog to check against.
        threshold: Base similarity ratio (0-1) for typo detection.
        bottle_volume_ml: When given, only products with this volume are compared.
    """
    candidate = _comparable_name(name)
    if not candidate:
        return None

    for product in existing:
        if bottle_volume_ml is not None and _volume_key(product.bottle_volume_ml) != _volume_key(bottle_volume_ml):
            continue

        other = _comparable_name(product.name)
        if not other:
            continue

        if candidate == other:
            return product

        if _is_substring_match(candidate, other):
            continue

        score = SequenceMatcher(None, candidate, other).ratio()
        if score >= _adaptive_threshold(candidate, other, threshold):
            if _has_significant_difference(candidate, other):
                continue
            logger.info(f"'{name}' looks like a duplicate of product {product.id} ({score:.0%})")
            return product

    return None
