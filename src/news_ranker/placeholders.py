"""Placeholder images for articles that arrive without one."""

from typing import List

PLACEHOLDER_IMAGES: List[str] = [
    "https://images.unsplash.com/photo-1518770660439-4636190af475?w=800&h=600&fit=crop",  # Technology
    "https://images.unsplash.com/photo-1507413245164-6160d8298b31?w=800&h=600&fit=crop",  # Science
    "https://images.unsplash.com/photo-1529107386315-e1a2ed48a620?w=800&h=600&fit=crop",  # Politics
    "https://images.unsplash.com/photo-1454165804606-c3d57bc86b40?w=800&h=600&fit=crop",  # Business
    "https://images.unsplash.com/photo-1478720568477-152d9b164e26?w=800&h=600&fit=crop",  # Entertainment
    "https://images.unsplash.com/photo-1461896836934-ffe607ba8211?w=800&h=600&fit=crop",  # Sports
    "https://images.unsplash.com/photo-1505751172876-fa1923c5c528?w=800&h=600&fit=crop",  # Health
    "https://images.unsplash.com/photo-1504711434969-e33886168f5c?w=800&h=600&fit=crop",  # News
]

DEFAULT_PLACEHOLDER_IMAGE = "https://images.unsplash.com/photo-1585829365295-ab7cd400c167?w=800&h=600&fit=crop"


def _seed_hash(seed: str) -> int:
    """31-multiplier string hash wrapped to a signed 32-bit integer."""
    value = 0
    for char in seed:
        value = (value * 31 + ord(char)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value


def placeholder_for_seed(seed: str) -> str:
    """
    Pick a placeholder image deterministically from a seed string.

    The same seed always maps to the same image, so an article keeps its
    placeholder across pipeline runs.
    """
    return PLACEHOLDER_IMAGES[abs(_seed_hash(seed)) % len(PLACEHOLDER_IMAGES)]


def is_placeholder_image(src: str) -> bool:
    return "images.unsplash.com" in src or src in PLACEHOLDER_IMAGES


def next_placeholder(current_src: str, seed: str) -> str:
    """Placeholder to try after ``current_src`` failed to load."""
    if current_src not in PLACEHOLDER_IMAGES:
        return placeholder_for_seed(seed)

    index = PLACEHOLDER_IMAGES.index(current_src)
    return PLACEHOLDER_IMAGES[(index + 1) % len(PLACEHOLDER_IMAGES)]
