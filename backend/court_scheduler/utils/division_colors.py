"""
Deterministic division colors for schedule views.

color = palette[division_id % len(palette)]. The same division always gets the
same color within one palette version; colors repeat past the palette size.
"""
from typing import Dict, Tuple

DIVISION_PALETTES: Dict[int, Tuple[str, ...]] = {
    1: (
        "#3b82f6",  # blue
        "#10b981",  # emerald
        "#f97316",  # orange
        "#8b5cf6",  # violet
        "#ef4444",  # red
        "#06b6d4",  # cyan
        "#f59e0b",  # amber
        "#ec4899",  # pink
        "#6366f1",  # indigo
        "#84cc16",  # lime
    ),
}

CURRENT_PALETTE_VERSION = 1


def division_color(division_id: int, palette_version: int = CURRENT_PALETTE_VERSION) -> str:
    palette = DIVISION_PALETTES[palette_version]
    return palette[division_id % len(palette)]
