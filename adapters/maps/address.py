import re

_PARENS = re.compile(r"\([^)]*\)")
_FLOOR_SUFFIX = re.compile(r"\s+\d+층.*$")
_UNIT_SUFFIX = re.compile(r"\s+\d+-?\d*호.*$")


def normalize_address(address: str) -> str:
    """
    Reduce a free-form Korean address to something the geocoders recognize:
    drop everything after the first comma, parenthesized notes, and
    trailing floor ("3층") or unit ("101-2호") parts.
    """
    text = (address or "").split(",", 1)[0]
    text = _PARENS.sub("", text)
    text = _FLOOR_SUFFIX.sub("", text)
    text = _UNIT_SUFFIX.sub("", text)
    return " ".join(text.split())
