"""
OMML to Math Notation Converter
===============================

Lowers Office Math Markup Language (``m:oMath`` / ``m:oMathPara``) into the
plain-text math notation understood by the Typst backend.

Supported OMML elements:
    - m:f (fraction) -> frac(num, den)
    - m:sSup / m:sSub / m:sSubSup -> base^sup, base_sub, base_sub^sup
    - m:rad (radical) -> sqrt(x) or root(n, x)
    - m:d (delimiter) -> (a, b), [x], ‖x‖, ⟨x⟩
    - m:nary (n-ary operators) -> sum_(i=1)^n x, integral, product, ...
    - m:func (function application) -> sin x
    - m:acc (accent) -> hat(x), tilde(x), arrow(x), ...
    - m:bar -> overline(x) / underline(x)
    - m:m (matrix) -> mat(a, b; c, d)
    - m:eqArr (equation array) -> rows joined with a line break
    - m:limLow / m:limUpp -> base_lim / base^lim

Sub/superscript bodies longer than one character are wrapped in parentheses.
Greek letters and common symbols become named identifiers; known function
names (sin, log, lim, ...) stay whole while other multi-letter words are split
into single-letter variables. Unknown elements are skipped together with
their subtree.

Maintenance Notes
-----------------
- Structural elements are preceded by a separator space when the output so
  far ends in an identifier character, so ``n`` followed by ``cos`` never
  fuses into ``ncos``
- Symbol tables can be extended as needed
"""

from __future__ import annotations

import logging
from typing import Optional
from xml.etree import ElementTree as ET

from office2pdf.parsers.util.xml_events import get_attr, local_name

logger = logging.getLogger(__name__)

M_NS = "{http://schemas.openxmlformats.org/officeDocument/2006/math}"

SYMBOL_TO_TYPST = {
    # Greek lowercase
    "α": "alpha",
    "β": "beta",
    "γ": "gamma",
    "δ": "delta",
    "ε": "epsilon",
    "ζ": "zeta",
    "η": "eta",
    "θ": "theta",
    "ι": "iota",
    "κ": "kappa",
    "λ": "lambda",
    "μ": "mu",
    "ν": "nu",
    "ξ": "xi",
    "ο": "omicron",
    "π": "pi",
    "ρ": "rho",
    "σ": "sigma",
    "ς": "sigma",
    "τ": "tau",
    "υ": "upsilon",
    "φ": "phi",
    "χ": "chi",
    "ψ": "psi",
    "ω": "omega",
    # Greek uppercase
    "Α": "Alpha",
    "Β": "Beta",
    "Γ": "Gamma",
    "Δ": "Delta",
    "Ε": "Epsilon",
    "Ζ": "Zeta",
    "Η": "Eta",
    "Θ": "Theta",
    "Ι": "Iota",
    "Κ": "Kappa",
    "Λ": "Lambda",
    "Μ": "Mu",
    "Ν": "Nu",
    "Ξ": "Xi",
    "Ο": "Omicron",
    "Π": "Pi",
    "Ρ": "Rho",
    "Σ": "Sigma",
    "Τ": "Tau",
    "Υ": "Upsilon",
    "Φ": "Phi",
    "Χ": "Chi",
    "Ψ": "Psi",
    "Ω": "Omega",
    # Math symbols
    "∞": "infinity",
    "∂": "partial",
    "∇": "nabla",
    "∅": "emptyset",
    "±": "plus.minus",
    "×": "times",
    "÷": "div",
    "≤": "lt.eq",
    "≥": "gt.eq",
    "≠": "eq.not",
    "≈": "approx",
    "∈": "in",
    "∉": "in.not",
    "⊂": "subset",
    "⊃": "supset",
    "∪": "union",
    "∩": "sect",
}

KNOWN_MATH_NAMES = frozenset(
    (
        "sin",
        "cos",
        "tan",
        "cot",
        "sec",
        "csc",
        "arcsin",
        "arccos",
        "arctan",
        "sinh",
        "cosh",
        "tanh",
        "coth",
        "ln",
        "log",
        "lg",
        "exp",
        "det",
        "dim",
        "gcd",
        "lcm",
        "max",
        "min",
        "sup",
        "inf",
        "lim",
        "arg",
        "deg",
        "mod",
    )
)

NARY_OPERATORS = {
    "∑": "sum",
    "∏": "product",
    "∫": "integral",
    "∬": "integral.double",
    "∭": "integral.triple",
    "∮": "integral.cont",
    "⋃": "union.big",
    "⋂": "sect.big",
}

ACCENTS = {
    "̂": "hat",
    "^": "hat",
    "̃": "tilde",
    "~": "tilde",
    "̄": "macron",
    "¯": "macron",
    "̇": "dot",
    "˙": "dot",
    "̈": "dot.double",
    "¨": "dot.double",
    "⃗": "arrow",
    "→": "arrow",
    "̌": "caron",
    "̆": "breve",
}

DELIMITERS = {
    "‖": "‖",
    "||": "‖",
    "⟨": "⟨",
    "<": "⟨",
    "⟩": "⟩",
    ">": "⟩",
}

_TRUE_VALUES = ("1", "true", "on")

# Characters with a meaning in math mode; literal in run text
MATH_ESCAPED_CHARACTERS = frozenset('\\$#"_^&@')


def _ends_with_identifier(out: str) -> bool:
    return bool(out) and out[-1].isalnum()


def ensure_math_separator(out: str) -> str:
    """Append a space if ``out`` ends with an alphanumeric character."""
    return out + " " if _ends_with_identifier(out) else out


def wrap_if_needed(body: str) -> str:
    trimmed = body.strip()
    if len(trimmed) <= 1:
        return trimmed
    return f"({trimmed})"


def map_delimiter(chr_: str) -> str:
    return DELIMITERS.get(chr_, chr_)


def _flush_word(result: str, word: str, last_was_name: bool) -> tuple[str, bool]:
    if word in KNOWN_MATH_NAMES:
        if result and (last_was_name or _ends_with_identifier(result)):
            result += " "
        return result + word, True
    if len(word) == 1:
        if last_was_name:
            result += " "
        return result + word, False
    # Unknown multi-letter sequence: one variable per letter
    for i, letter in enumerate(word):
        if i > 0 or last_was_name:
            result += " "
        result += letter
    return result, False


def map_math_text(text: str) -> str:
    """
    Map the text of a math run to notation identifiers.

    Characters that mean something in math mode are backslash-escaped.

    Example:
        >>> map_math_text("2πr")
        '2 pi r'
    """
    result = ""
    word = ""
    last_was_name = False

    for ch in text:
        if ch.isascii() and ch.isalpha():
            word += ch
            continue

        if word:
            result, last_was_name = _flush_word(result, word, last_was_name)
            word = ""

        name = SYMBOL_TO_TYPST.get(ch)
        if name is not None:
            if result and (last_was_name or _ends_with_identifier(result)):
                result += " "
            result += name
            last_was_name = True
        elif ch.isascii() and ch.isdigit():
            if last_was_name:
                result += " "
            result += ch
            last_was_name = False
        elif ch in MATH_ESCAPED_CHARACTERS:
            result += "\\" + ch
            last_was_name = False
        else:
            result += ch
            last_was_name = False

    if word:
        result, last_was_name = _flush_word(result, word, last_was_name)

    return result


def _child(elem: ET.Element, name: str) -> Optional[ET.Element]:
    return elem.find(f"{M_NS}{name}")


def _prop_val(props: Optional[ET.Element], name: str) -> Optional[str]:
    """``val`` of a property child (``m:begChr m:val="["``), if present."""
    if props is None:
        return None
    node = props.find(f"{M_NS}{name}")
    if node is None:
        return None
    return get_attr(node, "val")


def _sub(elem: Optional[ET.Element]) -> str:
    if elem is None:
        return ""
    return _convert_children(elem).strip()


def _append_run(out: str, run: ET.Element) -> str:
    text = "".join(t.text or "" for t in run.iter(f"{M_NS}t"))
    if not text:
        return out
    mapped = map_math_text(text)
    if not mapped:
        return out
    if _ends_with_identifier(out) and mapped[0].isalnum():
        out += " "
    out += mapped
    # Multi-char identifiers need a trailing separator; single letters don't
    if len(mapped) >= 2 and mapped[-1].isalpha() and mapped[-2].isalpha():
        out += " "
    return out


def _fraction(elem: ET.Element) -> str:
    num = _sub(_child(elem, "num"))
    den = _sub(_child(elem, "den"))
    return f"frac({num}, {den})"


def _superscript(elem: ET.Element) -> str:
    base = _sub(_child(elem, "e"))
    sup = _sub(_child(elem, "sup"))
    return f"{base}^{wrap_if_needed(sup)}"


def _subscript(elem: ET.Element) -> str:
    base = _sub(_child(elem, "e"))
    sub = _sub(_child(elem, "sub"))
    return f"{base}_{wrap_if_needed(sub)}"


def _sub_superscript(elem: ET.Element) -> str:
    base = _sub(_child(elem, "e"))
    sub = _sub(_child(elem, "sub"))
    sup = _sub(_child(elem, "sup"))
    return f"{base}_{wrap_if_needed(sub)}^{wrap_if_needed(sup)}"


def _radical(elem: ET.Element) -> str:
    props = _child(elem, "radPr")
    deg_hide = False
    if props is not None:
        hide = props.find(f"{M_NS}degHide")
        if hide is not None:
            # A bare on/off element means "on"
            val = get_attr(hide, "val")
            deg_hide = val is None or val in _TRUE_VALUES
    degree = _sub(_child(elem, "deg"))
    content = _sub(_child(elem, "e"))
    if deg_hide or not degree:
        return f"sqrt({content})"
    return f"root({degree}, {content})"


def _delimiter(elem: ET.Element) -> str:
    props = _child(elem, "dPr")
    beg = _prop_val(props, "begChr")
    end = _prop_val(props, "endChr")
    beg = "(" if beg is None else beg
    end = ")" if end is None else end
    items = [_sub(e) for e in elem.findall(f"{M_NS}e")]
    return f"{map_delimiter(beg)}{', '.join(items)}{map_delimiter(end)}"


def _nary(elem: ET.Element) -> str:
    chr_ = _prop_val(_child(elem, "naryPr"), "chr") or "∑"
    op = NARY_OPERATORS.get(chr_, "sum")
    sub = _sub(_child(elem, "sub"))
    sup = _sub(_child(elem, "sup"))
    content = _sub(_child(elem, "e"))
    out = op
    if sub:
        out += f"_{wrap_if_needed(sub)}"
    if sup:
        out += f"^{wrap_if_needed(sup)}"
    return f"{out} {content}"


def _function(elem: ET.Element) -> str:
    name = _sub(_child(elem, "fName"))
    content = _sub(_child(elem, "e"))
    return f"{name} {content}"


def _lim_low(elem: ET.Element) -> str:
    base = _sub(_child(elem, "e"))
    lim = _sub(_child(elem, "lim"))
    return f"{base}_{wrap_if_needed(lim)}"


def _lim_upp(elem: ET.Element) -> str:
    base = _sub(_child(elem, "e"))
    lim = _sub(_child(elem, "lim"))
    return f"{base}^{wrap_if_needed(lim)}"


def _accent(elem: ET.Element) -> str:
    chr_ = _prop_val(_child(elem, "accPr"), "chr") or "̂"
    accent = ACCENTS.get(chr_, "hat")
    return f"{accent}({_sub(_child(elem, 'e'))})"


def _bar(elem: ET.Element) -> str:
    pos = _prop_val(_child(elem, "barPr"), "pos") or "top"
    content = _sub(_child(elem, "e"))
    if pos == "bot":
        return f"underline({content})"
    return f"overline({content})"


def _matrix(elem: ET.Element) -> str:
    rows = []
    for row in elem.findall(f"{M_NS}mr"):
        rows.append(", ".join(_sub(e) for e in row.findall(f"{M_NS}e")))
    return f"mat({'; '.join(rows)})"


def _eq_array(elem: ET.Element) -> str:
    return " \\ ".join(_sub(e) for e in elem.findall(f"{M_NS}e"))


_STRUCTURES = {
    "f": _fraction,
    "rad": _radical,
    "nary": _nary,
    "func": _function,
    "acc": _accent,
    "bar": _bar,
    "m": _matrix,
    "eqArr": _eq_array,
    "limLow": _lim_low,
    "limUpp": _lim_upp,
    "sSup": _superscript,
    "sSub": _subscript,
    "sSubSup": _sub_superscript,
}


def _convert_children(parent: ET.Element) -> str:
    out = ""
    for child in parent:
        if not isinstance(child.tag, str):
            continue
        name = local_name(child.tag)
        handler = _STRUCTURES.get(name)
        if handler is not None:
            out = ensure_math_separator(out) + handler(child)
        elif name == "d":
            out += _delimiter(child)
        elif name == "r":
            out = _append_run(out, child)
        elif name in ("oMath", "oMathPara"):
            out += _convert_children(child)
        # anything else (properties, ctrlPr, unknown) is skipped with its subtree
    return out


def _convert_root(root: ET.Element) -> str:
    name = local_name(root.tag)
    if name in ("oMath", "oMathPara", "root"):
        return _convert_children(root).strip()
    if name in _STRUCTURES or name in ("d", "r"):
        wrapper = ET.Element("root")
        wrapper.append(root)
        return _convert_children(wrapper).strip()
    # A container holding math somewhere below
    for elem in root.iter():
        if isinstance(elem.tag, str) and local_name(elem.tag) in ("oMathPara", "oMath"):
            return _convert_children(elem).strip()
    return ""


def omml_to_typst(source: ET.Element | bytes | str) -> str:
    """
    Convert an OMML element (or XML text) to math notation.

    Args:
        source: An ``m:oMath`` / ``m:oMathPara`` element, or XML containing
            one. A bare fragment of OMML children is also accepted.

    Returns:
        Notation without ``$`` delimiters; empty string for unparseable input.
    """
    if isinstance(source, ET.Element):
        return _convert_root(source)

    if isinstance(source, bytes):
        source = source.decode("utf-8", errors="replace")
    try:
        root = ET.fromstring(source)
    except ET.ParseError:
        wrapped = f'<root xmlns:m="{M_NS[1:-1]}">{source}</root>'
        try:
            root = ET.fromstring(wrapped)
        except ET.ParseError as exc:
            logger.debug(f"Unparseable OMML fragment - {exc}")
            return ""
    return _convert_root(root)
