import unittest

from office2pdf.render.font_subst import font_with_fallbacks, substitute_font

tc = unittest.TestCase()


def test_substitute_font_is_case_insensitive() -> None:
    tc.assertListEqual(["Carlito", "Liberation Sans"], substitute_font("Calibri"))
    tc.assertListEqual(["Carlito", "Liberation Sans"], substitute_font("  CALIBRI "))
    tc.assertListEqual(["Liberation Serif", "Tinos"], substitute_font("Times New Roman"))


def test_unknown_font_has_no_substitutes() -> None:
    tc.assertIsNone(substitute_font("Fira Sans"))


def test_font_with_fallbacks() -> None:
    tc.assertEqual(
        '("Calibri", "Carlito", "Liberation Sans")', font_with_fallbacks("Calibri")
    )
    tc.assertEqual('"Fira Sans"', font_with_fallbacks("Fira Sans"))
    tc.assertEqual('"Odd \\"Quoted\\" Font"', font_with_fallbacks('Odd "Quoted" Font'))
