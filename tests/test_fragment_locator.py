# tests/test_fragment_locator.py

"""Tests for locating var_dump station fragments in page markup."""

import unittest

from src.extraction.fragment_locator import Fragment, locate_fragments


def _dump(
    station_id: int,
    un: int = 134,
    saldo: str = "12345.00",
    fecha: str = "2025-01-31 10:15:00",
) -> str:
    """Render one station the way PHP's var_dump prints it."""
    return (
        "array(5) {\n"
        f'  ["id"]=>\n  int({station_id})\n'
        f'  ["un"]=>\n  int({un})\n'
        '  ["producto_id"]=>\n  int(1)\n'
        f'  ["fecha"]=>\n  string({len(fecha)}) "{fecha}"\n'
        f'  ["saldo"]=>\n  string({len(saldo)}) "{saldo}"\n'
        "}\n"
    )


class TestLocateFragments(unittest.TestCase):
    """Pattern matching and context windows."""

    def test_single_fragment_fields(self) -> None:
        """All six fields are captured with the right types."""
        html = "<pre>" + _dump(5850287, un=77, saldo="800.5") + "</pre>"
        fragments = list(locate_fragments(html))

        self.assertEqual(len(fragments), 1)
        frag = fragments[0]
        self.assertIsInstance(frag, Fragment)
        self.assertEqual(frag.location_id, 5850287)
        self.assertEqual(frag.secondary_id, 77)
        self.assertEqual(frag.product_id, 1)
        self.assertEqual(frag.measured_at, "2025-01-31 10:15:00")
        self.assertEqual(frag.raw_balance, "800.5")
        self.assertEqual(frag.offset, len("<pre>"))

    def test_document_order(self) -> None:
        """Fragments come out in the order they appear."""
        html = _dump(3) + "<hr>" + _dump(1) + "<hr>" + _dump(2)
        ids = [f.location_id for f in locate_fragments(html)]
        self.assertEqual(ids, [3, 1, 2])

    def test_compact_whitespace_matches(self) -> None:
        """Single-line dumps without newlines are still recognised."""
        html = (
            'array(5) {["id"]=> int(9) ["un"]=> int(1) '
            '["producto_id"]=> int(2) ["fecha"]=> string(3) "now" '
            '["saldo"]=> string(2) "10"}'
        )
        fragments = list(locate_fragments(html))
        self.assertEqual(len(fragments), 1)
        self.assertEqual(fragments[0].product_id, 2)

    def test_no_fragments(self) -> None:
        """A page without dumps yields nothing and does not raise."""
        self.assertEqual(
            list(locate_fragments("<html><body>Mantenimiento</body></html>")),
            [],
        )

    def test_missing_key_is_skipped(self) -> None:
        """A dump without the "un" key does not match."""
        broken = _dump(5).replace('  ["un"]=>\n  int(134)\n', "")
        html = broken + _dump(6)
        ids = [f.location_id for f in locate_fragments(html)]
        self.assertEqual(ids, [6])

    def test_wrong_type_tag_is_skipped(self) -> None:
        """A saldo printed as int() instead of string() does not match."""
        broken = (
            "array(5) {\n"
            '  ["id"]=>\n  int(5)\n'
            '  ["un"]=>\n  int(1)\n'
            '  ["producto_id"]=>\n  int(1)\n'
            '  ["fecha"]=>\n  string(3) "now"\n'
            '  ["saldo"]=>\n  int(100)\n'
            "}\n"
        )
        self.assertEqual(list(locate_fragments(broken)), [])

    def test_returns_lazy_iterator(self) -> None:
        """The locator is a generator, consumed on demand."""
        iterator = locate_fragments(_dump(1) + _dump(2))
        self.assertEqual(next(iterator).location_id, 1)
        self.assertEqual(next(iterator).location_id, 2)
        with self.assertRaises(StopIteration):
            next(iterator)

    def test_context_window_in_middle(self) -> None:
        """Context spans 3000 chars either side of the match start."""
        html = "a" * 5000 + _dump(1) + "b" * 5000
        frag = next(locate_fragments(html))
        self.assertEqual(frag.context, html[2000:8000])
        self.assertEqual(len(frag.context), 6000)

    def test_context_clamped_to_document(self) -> None:
        """Near the edges the window is clipped, not padded."""
        html = "head" + _dump(1) + "tail"
        frag = next(locate_fragments(html))
        self.assertEqual(frag.context, html)

    def test_custom_window(self) -> None:
        """A smaller window narrows the context."""
        html = "x" * 100 + _dump(1)
        frag = next(locate_fragments(html, window=10))
        self.assertEqual(frag.context, html[90:110])


if __name__ == "__main__":
    unittest.main()
