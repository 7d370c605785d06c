# src/extraction/fragment_locator.py

"""Locate ``var_dump``-style station arrays embedded in the page markup.

The source page prints each station reading as PHP debug output, e.g.::

    array(5) {
      ["id"]=> int(5850287)
      ["un"]=> int(134)
      ["producto_id"]=> int(1)
      ["fecha"]=> string(19) "2025-01-31 10:15:00"
      ["saldo"]=> string(8) "12345.00"
    }

Blocks missing a key or carrying a different type tag do not match and are
silently skipped.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass

DEFAULT_WINDOW = 3000

_FRAGMENT_RE = re.compile(
    r'array\(\d+\)\s*\{\s*'
    r'\["id"\]=>\s*int\((\d+)\)\s*'
    r'\["un"\]=>\s*int\((\d+)\)\s*'
    r'\["producto_id"\]=>\s*int\((\d+)\)\s*'
    r'\["fecha"\]=>\s*string\(\d+\)\s*"([^"]+)"\s*'
    r'\["saldo"\]=>\s*string\(\d+\)\s*"([^"]+)"\s*'
    r'\}'
)


@dataclass(frozen=True)
class Fragment:
    """One matched station array plus the markup surrounding it."""

    location_id: int
    secondary_id: int
    product_id: int
    measured_at: str
    raw_balance: str
    offset: int
    context: str


def locate_fragments(
    html: str, window: int = DEFAULT_WINDOW,
) -> Iterator[Fragment]:
    """Yield every station fragment in *html*, in document order.

    ``context`` spans up to *window* characters before and after the
    start of the match, clamped to the document bounds.
    """
    for match in _FRAGMENT_RE.finditer(html):
        start = match.start()
        yield Fragment(
            location_id=int(match.group(1)),
            secondary_id=int(match.group(2)),
            product_id=int(match.group(3)),
            measured_at=match.group(4),
            raw_balance=match.group(5),
            offset=start,
            context=html[max(0, start - window):start + window],
        )
