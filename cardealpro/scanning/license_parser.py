"""
Heuristic parser for OCR text from an Ohio driver's license.

Line rules, checked in order for each line:

- contains ``DL``: the first two words are last name and first name
- ends in a ZIP code: the ZIP, and the words before it as the city
  (a trailing two-letter state code is split off)
- starts with a house number followed by a word: the street address

Best effort only; fields that were not found are omitted from the result.
"""

import re

from cardealpro.config import settings

_ZIP_LINE = re.compile(r"^(?P<before>.*?)\s*\b(?P<zip>\d{5})(?:-\d{4})?\s*$")
_ADDRESS_LINE = re.compile(r"^\d+\s[A-Z]", re.IGNORECASE)
_STATE_CODE = re.compile(r"^[A-Z]{2}$")


def _split_city_state(text: str) -> tuple[str, str]:
    words = [w for w in re.split(r"[\s,]+", text.strip()) if w]
    if len(words) > 1 and _STATE_CODE.match(words[-1]):
        return " ".join(words[:-1]), words[-1]
    return " ".join(words), ""


def parse_ohio_license(text: str) -> dict[str, str]:
    """
    Extract identity fields from raw license text.

    Returns:
        Dict keyed by identity field names (``firstName``, ``lastName``,
        ``address``, ``city``, ``state``, ``zipCode``). ``state`` falls back
        to the dealership's home state.

    Examples:
        >>> parse_ohio_license("DOE JANE DL 12345678\\n533 BELLEVIEW AVE\\nCHILLICOTHE OH 45601")
        {'firstName': 'JANE', 'lastName': 'DOE', 'address': '533 BELLEVIEW AVE', 'city': 'CHILLICOTHE', 'state': 'OH', 'zipCode': '45601'}
    """
    result: dict[str, str] = {}
    state = ""

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        if "DL" in line:
            parts = line.split()
            if len(parts) >= 2:
                result["lastName"] = parts[0]
                result["firstName"] = parts[1]
            continue

        zip_match = _ZIP_LINE.match(line)
        if zip_match:
            result["zipCode"] = zip_match.group("zip")
            city, found_state = _split_city_state(zip_match.group("before"))
            if city:
                result["city"] = city
            if found_state:
                state = found_state
            continue

        if _ADDRESS_LINE.match(line):
            result["address"] = line

    result["state"] = state or settings.dealership.home_state
    return {
        key: result[key]
        for key in ("firstName", "lastName", "address", "city", "state", "zipCode")
        if result.get(key)
    }
