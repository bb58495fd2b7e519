import hashlib
from collections import Counter
from typing import Dict
import re

# Palindrome comparison ignores everything but ASCII letters and digits
_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]")


def compute_sha256(text: str) -> str:
    """Compute SHA-256 hash of the UTF-8 bytes of a string"""
    return hashlib.sha256(text.encode("utf-8", "surrogatepass")).hexdigest()


def normalize_for_palindrome(text: str) -> str:
    """Lowercase and strip every non-alphanumeric character"""
    return _NON_ALPHANUMERIC.sub("", text.lower())


def is_palindrome(text: str) -> bool:
    """Check if string is a palindrome (case-insensitive, alphanumerics only)"""
    cleaned = normalize_for_palindrome(text)
    return cleaned == cleaned[::-1]


def count_unique_characters(text: str) -> int:
    """Count distinct characters in string"""
    return len(set(text))


def count_words(text: str) -> int:
    """Count whitespace-delimited words; blank strings have none"""
    return len(text.split())


def get_character_frequency(text: str) -> Dict[str, int]:
    """Get frequency map of each character"""
    return dict(Counter(text))


def analyze_string(value: str) -> Dict:
    """
    Analyze a string and return all computed properties.

    Length is measured in code points. The hash is always taken over the
    original string, never the normalized palindrome form.
    """
    return {
        "length": len(value),
        "is_palindrome": is_palindrome(value),
        "unique_characters": count_unique_characters(value),
        "word_count": count_words(value),
        "sha256_hash": compute_sha256(value),
        "character_frequency_map": get_character_frequency(value),
    }
