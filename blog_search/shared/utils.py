"""
Shared helper functions.
Tokenization and key normalization must be identical at index and query time.
"""
from typing import List, Optional
from re import sub

def tokenize(text: Optional[str]) -> List[str]:
    """
    Tokenize text into normalized terms.
    - Lowercase
    - Remove non-alphanumeric characters
    """
    if not text: return []
    text = text.lower()
    text = sub(r'[^a-z0-9]', ' ', text) # replace non-alphanumeric with space
    tokens = text.split()
    return tokens

def normalize_key(value: Optional[str]) -> str:
    """Normalize an author name or tag: trim surrounding whitespace and lowercase."""
    if value is None: return ""
    return value.strip().lower()

def normalize_keyword(keyword: Optional[str]) -> str:
    """Normalize a keyword query into its cache signature (space-joined tokens)."""
    return " ".join(tokenize(keyword))
