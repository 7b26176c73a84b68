"""Cleanup of OCR text before it reaches the editor.

Japanese OCR often inserts spaces between CJK characters ("藤 門 千 明"
instead of "藤門千明"). Those spaces are removed, while spaces next to Latin
text ("グループ CIO") and between Latin words are kept.
"""

import re

# Han, Hiragana, Katakana (incl. halfwidth), CJK punctuation and fullwidth forms
_CJK = (
    "\u3001-\u303f"
    "\u3040-\u309f"
    "\u30a0-\u30ff"
    "\u31f0-\u31ff"
    "\u3400-\u4dbf"
    "\u4e00-\u9fff"
    "\uf900-\ufaff"
    "\uff01-\uff60"
    "\uff66-\uff9f"
    "\U00020000-\U0003134f"
)

CJK_SPACE_ARTIFACT = re.compile(f"([{_CJK}])\\s+(?=[{_CJK}])")

def normalize_cjk_spaces(text: str) -> str:
    """Remove whitespace runs between two consecutive CJK characters."""
    return CJK_SPACE_ARTIFACT.sub(r"\1", text)
