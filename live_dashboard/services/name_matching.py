"""
Name Normalization and Identity Matching Service

Host and reporter names in live-session reports are typed by hand. The same
person shows up as "Nguyễn Văn A", "nguyen van a", "Nguyễn  Văn A " or
"Trình - PT". This module reduces names to comparable forms and decides
whether two free-text strings denote the same person.

Normalization produces two forms:
- accented: NFC-composed, lower-cased, punctuation replaced by spaces,
  whitespace collapsed. Vietnamese diacritics are preserved.
- plain: the accented form with diacritics removed and đ folded to d.
  Used as a looser fallback for names entered without accents.

Matching rules (names_match), applied in order:
1. Either side normalizes to empty -> no match
2. accented forms equal -> match
3. plain forms equal -> match
4. plain forms equal once spaces are removed -> match ("nguyenvana" vs "Nguyễn Văn A")
5. one plain form contains the other -> match, only when both have at least
   name_match_min_length non-space characters

The matcher is symmetric and reflexive for non-blank input. It does not
resolve ambiguity when a short name is contained in several longer ones;
PersonnelDirectory applies the tie-break.
"""

import logging
import math
import re
import unicodedata
from functools import lru_cache
from typing import Any, NamedTuple, Optional

from live_dashboard.core.config import get_settings


logger = logging.getLogger(__name__)

# \w keeps letters and digits of every script; underscore is punctuation here
_NON_WORD_RE = re.compile(r"[^\w\s]|_", re.UNICODE)
_WHITESPACE_RE = re.compile(r"\s+", re.UNICODE)

# Letters that carry no combining mark under NFD
_LETTER_FOLDS = str.maketrans({"đ": "d", "Đ": "d"})


class NormalizedName(NamedTuple):
    """Both comparison forms of a name."""
    accented: str
    plain: str

    @property
    def compact(self) -> str:
        return self.plain.replace(" ", "")


def _coerce_text(value: Any) -> str:
    """Turn any input into text; None and NaN become empty."""
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def _collapse(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


@lru_cache(maxsize=8192)
def _normalize_text(text: str) -> NormalizedName:
    composed = unicodedata.normalize("NFC", text).lower()
    accented = _collapse(_NON_WORD_RE.sub(" ", composed))

    decomposed = unicodedata.normalize("NFD", accented)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    plain = _collapse(unicodedata.normalize("NFC", stripped).translate(_LETTER_FOLDS))

    return NormalizedName(accented=accented, plain=plain)


def normalize_pair(name: Any) -> NormalizedName:
    """
    Normalize a name into its accented and plain comparison forms.

    Args:
        name: Any value; None and non-string input are tolerated.

    Returns:
        NormalizedName with both forms ("" for blank input).

    Example:
        >>> normalize_pair("  Nguyễn   Văn (A) ")
        NormalizedName(accented='nguyễn văn a', plain='nguyen van a')
    """
    return _normalize_text(_coerce_text(name))


def normalize_name(name: Any) -> str:
    """Diacritic-preserving normalized form of a name."""
    return normalize_pair(name).accented


def strip_diacritics_name(name: Any) -> str:
    """Diacritic-stripped normalized form of a name."""
    return normalize_pair(name).plain


def email_local_part(email: Any) -> str:
    """
    Return the part of an email address before '@'.

    Text without '@' is returned stripped and unchanged; None becomes "".
    """
    text = _coerce_text(email).strip()
    local, sep, _domain = text.partition("@")
    return local if sep else text


def _long_enough(form: NormalizedName, min_length: int) -> bool:
    return len(form.compact) >= min_length


def match_normalized(
    a: NormalizedName,
    b: NormalizedName,
    min_length: int,
) -> bool:
    """
    Apply the matching rules to two already-normalized names.

    Args:
        a: First normalized name.
        b: Second normalized name.
        min_length: Minimum non-space length for substring containment.

    Returns:
        True if the names are considered the same person.
    """
    if not a.accented or not b.accented:
        return False

    if a.accented == b.accented:
        return True

    if a.plain == b.plain:
        return True

    if a.compact == b.compact:
        return True

    if _long_enough(a, min_length) and _long_enough(b, min_length):
        return a.plain in b.plain or b.plain in a.plain

    return False


def names_match(a: Any, b: Any, min_length: Optional[int] = None) -> bool:
    """
    Decide whether two free-text strings denote the same person.

    The matcher is string-agnostic: callers may pass a name and an email
    (or its local part) as well as two names.

    Args:
        a: First name.
        b: Second name.
        min_length: Minimum non-space length both names need before substring
            containment is considered. Defaults to settings.name_match_min_length.

    Returns:
        True on a match; always False when either side is blank.

    Example:
        >>> names_match("Trình", "Trình - PT")
        True
        >>> names_match("Nguyen Van A", "Nguyễn Văn A")
        True
        >>> names_match("", "Nguyễn Văn A")
        False
    """
    if min_length is None:
        min_length = get_settings().name_match_min_length

    left = normalize_pair(a)
    right = normalize_pair(b)

    if not left.accented and not right.accented:
        # Pure punctuation such as "???" only matches itself
        raw_left = _coerce_text(a).strip()
        return bool(raw_left) and raw_left == _coerce_text(b).strip()

    return match_normalized(left, right, min_length)
