"""Project color assignment."""

from __future__ import annotations

import random
from typing import Any, Iterable

PALETTE = (
    "#4f46e5", "#7c3aed", "#db2777", "#dc2626", "#ea580c",
    "#d97706", "#65a30d", "#16a34a", "#0d9488", "#0891b2",
    "#0284c7", "#2563eb", "#4338ca", "#6d28d9", "#a21caf",
    "#be185d", "#b91c1c", "#c2410c", "#a16207", "#4d7c0f",
    "#15803d", "#0f766e", "#0e7490", "#0369a1", "#1d4ed8",
)


def normalize_color(value: Any) -> str:
    return str(value or "").strip().lower()


class ColorAllocator:
    """Hands out project colors that no live project is using.

    The used set is a cache: reconcile() rebuilds it from the authoritative
    project list, which releases colors of deleted projects.
    """

    def __init__(self, palette: Iterable[str] = PALETTE, *, rng: random.Random | None = None):
        self.palette = tuple(normalize_color(c) for c in palette)
        self._used: set[str] = set()
        self._rng = rng or random.Random()

    @property
    def used(self) -> frozenset[str]:
        return frozenset(self._used)

    def reconcile(self, projects: Iterable[dict[str, Any]]) -> None:
        self._used = {normalize_color(p.get("color")) for p in projects if p.get("color")}

    def reserve(self, color: str) -> None:
        self._used.add(normalize_color(color))

    def release(self, color: str | None) -> None:
        self._used.discard(normalize_color(color))

    def is_used(self, color: str | None) -> bool:
        return normalize_color(color) in self._used

    def generate(self) -> str:
        """Reserve and return the first free palette color, else a random unused one."""
        for color in self.palette:
            if color not in self._used:
                self._used.add(color)
                return color

        while True:
            color = f"#{self._rng.randrange(0x1000000):06x}"
            if color not in self._used:
                self._used.add(color)
                return color
