"""
Metric-compatible font substitution.

Maps common Microsoft fonts to open-source alternatives with the same
metrics, so that line breaks stay close to the original when the
proprietary font is not installed. The renderer tries the names in order.
"""

from typing import Optional

FONT_SUBSTITUTES = {
    "calibri": ("Carlito", "Liberation Sans"),
    "cambria": ("Caladea", "Liberation Serif"),
    "arial": ("Liberation Sans", "Arimo"),
    "times new roman": ("Liberation Serif", "Tinos"),
    "courier new": ("Liberation Mono", "Cousine"),
    "comic sans ms": ("Comic Neue",),
    "verdana": ("DejaVu Sans",),
    "georgia": ("DejaVu Serif",),
    "consolas": ("Inconsolata",),
    "trebuchet ms": ("Ubuntu",),
    "impact": ("Oswald",),
}


def substitute_font(font_family: str) -> Optional[list[str]]:
    """
    Substitutes for a font family, best match first.

    Args:
        font_family: Family name as found in the document (case-insensitive).

    Returns:
        The substitute names, or None when the family has no entry.
    """
    substitutes = FONT_SUBSTITUTES.get(font_family.strip().lower())
    if substitutes is None:
        return None
    return list(substitutes)


def _quote(name: str) -> str:
    return '"' + name.replace("\\", "\\\\").replace('"', '\\"') + '"'


def font_with_fallbacks(font_family: str) -> str:
    """
    Markup value for a ``font:`` argument.

    ``Calibri`` becomes ``("Calibri", "Carlito", "Liberation Sans")``; a
    family without substitutes stays a single quoted name.
    """
    substitutes = substitute_font(font_family)
    if substitutes is None:
        return _quote(font_family)
    names = [font_family] + substitutes
    return "(" + ", ".join(_quote(name) for name in names) + ")"
