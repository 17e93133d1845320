"""Split transcript text into sentences or clauses.

The returned units are the canonical display text of the chunks, so the
original punctuation and casing are kept intact.
"""

from .normalize import is_word_char

SENTENCE_DELIMITERS = frozenset(".!?")
CLAUSE_DELIMITERS = frozenset(",.!?")

# Closing quotes and brackets that belong to the sentence they close
_CLOSERS = frozenset("\"')]}»”’")

# Lowercase, dots removed. A "." after one of these does not end a sentence.
ABBREVIATIONS = frozenset({
    # titles
    "mr", "mrs", "ms", "dr", "prof", "sr", "jr", "rev", "hon", "gen", "col",
    "lt", "sgt", "capt",
    # degrees (partial forms too: "Ph.D." -> "ph", "phd")
    "ph", "phd", "md", "ba", "ma", "bs", "jd", "esq", "dds", "rn", "mba",
    "llb", "dmin",
    # common
    "etc", "vs", "viz", "al", "eg", "ie", "cf", "approx", "apt", "dept",
    "est", "vol", "no", "fig", "inc", "corp", "ltd", "co", "govt", "assn",
    "bros", "misc",
    # addresses
    "mt", "st", "ave", "blvd", "rd", "ln", "ct", "pl", "hwy",
    # months
    "jan", "feb", "mar", "apr", "jun", "jul", "aug", "sep", "sept", "oct",
    "nov", "dec",
    # units
    "hr", "hrs", "min", "sec", "lb", "lbs", "oz", "ft", "in", "cm", "km",
    "kg", "mg", "ml", "pt", "qt", "gal",
    # countries
    "us", "usa", "uk", "eu",
})

# Also ordinary words; only abbreviations before a number or in capitals
CONTEXTUAL_ABBREVIATIONS = frozenset({"no", "in", "us"})


def split(text: str, sentence_only: bool = True) -> list[str]:
    """
    Split text into ordered sentence (or clause) units.

    Args:
        text: Transcript text
        sentence_only: If False, commas also end a unit

    Returns:
        Non-empty, whitespace-trimmed units in input order
    """
    delimiters = SENTENCE_DELIMITERS if sentence_only else CLAUSE_DELIMITERS
    units: list[str] = []
    current: list[str] = []

    i = 0
    n = len(text)
    while i < n:
        char = text[i]
        current.append(char)

        if char in delimiters:
            # Consume the whole run ("?!", "...") and any closing quotes
            while i + 1 < n and text[i + 1] in delimiters:
                i += 1
                current.append(text[i])
            while i + 1 < n and text[i + 1] in _CLOSERS:
                i += 1
                current.append(text[i])

            run_is_period = all(c == "." for c in _trailing_run(current, delimiters))
            mid_token = i + 1 < n and not text[i + 1].isspace()
            following = text[i + 1:].lstrip()[:1]
            if run_is_period and (
                mid_token or _ends_with_abbreviation("".join(current), following)
            ):
                pass
            elif char == "," and mid_token:
                # Digit grouping: "1,000"
                pass
            else:
                _flush(current, units)
        i += 1

    _flush(current, units)
    return units


def ends_with_delimiter(text: str, sentence_only: bool = True) -> bool:
    """Check whether a unit closes a sentence (or clause)."""
    delimiters = SENTENCE_DELIMITERS if sentence_only else CLAUSE_DELIMITERS
    stripped = text.rstrip().rstrip("".join(_CLOSERS))
    return stripped[-1:] in delimiters


def _flush(current: list[str], units: list[str]) -> None:
    unit = " ".join("".join(current).split())
    if unit:
        units.append(unit)
    current.clear()


def _trailing_run(current: list[str], delimiters: frozenset[str]) -> str:
    chars = "".join(current).rstrip("".join(_CLOSERS))
    end = len(chars)
    start = end
    while start > 0 and chars[start - 1] in delimiters:
        start -= 1
    return chars[start:end]


def _ends_with_abbreviation(text: str, following: str = "") -> bool:
    last_word = _last_word(text)
    if not last_word:
        return False

    bare = last_word.replace(".", "").lower()
    if bare in CONTEXTUAL_ABBREVIATIONS:
        # "No. 5" and "the US." but not "I said no." or "Come in."
        return following.isdigit() or last_word.replace(".", "").isupper()
    if bare in ABBREVIATIONS:
        return True
    # Initial, e.g. "John F."
    if len(bare) == 1 and bare.isalpha():
        return True
    # Dotted acronym, e.g. "U.S.A."
    return _is_dotted_acronym(last_word)


def _last_word(text: str) -> str:
    trimmed = text.rstrip()
    start = len(trimmed)
    while start > 0 and (is_word_char(trimmed[start - 1]) or trimmed[start - 1] == "."):
        start -= 1
    return trimmed[start:]


def _is_dotted_acronym(word: str) -> bool:
    parts = word.split(".")
    if parts[-1] != "":
        return False
    letters = parts[:-1]
    return len(letters) >= 2 and all(len(p) == 1 and p.isalpha() for p in letters)
