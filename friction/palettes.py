"""
Colour schemes for the friction simulation.

Each scheme defines:
  - top_book / bottom_book:        Macroscopic book covers (RGB)
  - top_magnified / bottom_magnified: Book backgrounds inside the magnifier
  - top_atoms / bottom_atoms:      Atom fill colours
  - text:                          Book title colour
  - background:                    Play area colour
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

RGB = Tuple[int, int, int]


@dataclass(frozen=True)
class ColorScheme:
    """Immutable colour scheme for books and atoms."""
    name: str
    top_book: RGB
    top_magnified: RGB
    top_atoms: RGB
    bottom_book: RGB
    bottom_magnified: RGB
    bottom_atoms: RGB
    text: RGB = (64, 64, 64)
    background: RGB = (255, 255, 255)
    thermometer_fluid: RGB = (237, 28, 36)


# ── Built-in schemes ─────────────────────────────────────────────────────

SCHEMES: Dict[str, ColorScheme] = {
    "classic": ColorScheme(
        name="Classic",
        top_book=(125, 226, 249), top_magnified=(125, 226, 249), top_atoms=(0, 255, 255),
        bottom_book=(183, 255, 181), bottom_magnified=(187, 255, 187), bottom_atoms=(0, 255, 0),
    ),
    "high_contrast": ColorScheme(
        name="High Contrast",
        top_book=(30, 90, 200), top_magnified=(60, 120, 220), top_atoms=(255, 220, 0),
        bottom_book=(200, 60, 30), bottom_magnified=(220, 90, 60), bottom_atoms=(255, 255, 255),
        text=(255, 255, 255), background=(20, 20, 20),
    ),
}

DEFAULT_SCHEME = "classic"


def get_scheme(name: str) -> ColorScheme:
    """Look up a scheme by key, falling back to the default."""
    return SCHEMES.get(name, SCHEMES[DEFAULT_SCHEME])


def list_schemes() -> List[str]:
    return list(SCHEMES.keys())
