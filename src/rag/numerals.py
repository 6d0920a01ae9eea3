from __future__ import annotations

"""Chinese numeral to Arabic numeral conversion.

This is a best-effort place-value parser, not a complete implementation of
the numeral system. Known limitations:

* units above 萬 (億, 兆, ...) are not recognized;
* nested large-number grouping such as 一萬二千三百 mixed with further 萬
  groups is not reconstructed;
* zero glyphs are treated as separators and never insert positional zeros.

Indexed episode titles were normalized with exactly these rules, so the
behavior must not be generalized.
"""

import re

DIGITS: dict[str, int] = {
    "零": 0,
    "〇": 0,
    "一": 1,
    "二": 2,
    "三": 3,
    "四": 4,
    "五": 5,
    "六": 6,
    "七": 7,
    "八": 8,
    "九": 9,
}

UNITS: dict[str, int] = {
    "十": 10,
    "百": 100,
    "千": 1000,
    "萬": 10000,
}

NUMERAL_GLYPHS = "".join(DIGITS) + "".join(UNITS)

_ARABIC_RE = re.compile(r"[0-9]+")


def normalize_numeral(text: str) -> str:
    """Convert a Chinese numeral run to a decimal string.

    Returns the input unchanged when it is already Arabic digits, contains a
    character outside the numeral alphabet, or parses to zero without
    containing a zero glyph.
    """
    if _ARABIC_RE.fullmatch(text):
        return text
    if len(text) == 1 and text in DIGITS:
        return str(DIGITS[text])

    result = 0
    pending = 0
    last_unit = 1
    for char in text:
        if char in DIGITS:
            value = DIGITS[char]
            if value == 0:
                continue
            pending = value
        elif char in UNITS:
            unit = UNITS[char]
            if pending == 0:
                pending = 1
            if unit >= last_unit:
                result = (result + pending) * unit
            else:
                result += pending * unit
            last_unit = unit
            pending = 0
        else:
            return text
    result += pending

    if result == 0 and "零" not in text and "〇" not in text:
        return text
    return str(result)
