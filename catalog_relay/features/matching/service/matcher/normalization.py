import re
import unicodedata
from functools import lru_cache
from typing import Optional

_NON_WORD_RE = re.compile(r'[^\w\s]')
_WHITESPACE_RE = re.compile(r'\s+')
_TRAILING_DASH_RE = re.compile(r'\s+-\s*$')
_SKU_STRIP_RE = re.compile(r'[^0-9A-Z]')

@lru_cache(maxsize=512)
def _brand_prefix_re(brand: str) -> re.Pattern:
    # "LOFT", "LOFT.73", "loft.73 -", "LOFT: " ... but not "Loftus"
    return re.compile(
        rf'^\s*{re.escape(brand)}(?:\.\d+)?(?:\s*[-–—:|/]\s*|\s+|$)',
        re.IGNORECASE,
    )

@lru_cache(maxsize=65536)
def normalize_name(name: Optional[str]) -> str:
    """
    Normalize a product name for comparison.

    - NFKC, lower-case
    - punctuation that is not part of a word removed
    - whitespace collapsed and trimmed
    """
    if not name:
        return ""
    text = unicodedata.normalize('NFKC', name).lower()
    text = _NON_WORD_RE.sub('', text)
    text = _WHITESPACE_RE.sub(' ', text)
    return text.strip()

def strip_brand(name: Optional[str], brand: Optional[str]) -> str:
    """Remove a leading brand prefix and a trailing " - " from a raw name."""
    if not name:
        return ""
    text = name
    if brand:
        text = _brand_prefix_re(brand).sub('', text, count=1)
    text = _TRAILING_DASH_RE.sub('', text)
    return text.strip()

@lru_cache(maxsize=65536)
def core_name(name: Optional[str], brand: Optional[str]) -> str:
    """Normalized name with the brand prefix and trailing dash removed."""
    return normalize_name(strip_brand(name, brand))

def normalize_sku(sku: Optional[str]) -> str:
    if not sku:
        return ""
    return sku.strip().upper()

def strip_sku(sku: Optional[str]) -> str:
    """Upper-cased SKU with everything except A-Z and 0-9 removed."""
    return _SKU_STRIP_RE.sub('', normalize_sku(sku))
