# bidprice/normalize.py
"""Field normalizers for raw auction-sheet cells.

Every function here is pure and tolerant: bad input degrades to an empty
string or ``0`` instead of raising, so one malformed cell never aborts an
import.
"""
import math
import re
from types import MappingProxyType
from typing import Any, NamedTuple

NBSP = "\u00a0"

_BRANDS = {
    "toyota": "Toyota",
    "honda": "Honda",
    "mazda": "Mazda",
    "bmw": "BMW",
    "mercedes-benz": "Mercedes-Benz",
    "audi": "Audi",
    "proton": "Proton",
    "perodua": "Perodua",
    "suzuki": "Suzuki",
    "mini": "Mini",
    "lexus": "Lexus",
    "volkswagen": "Volkswagen",
    "nissan": "Nissan",
    "hyundai": "Hyundai",
    "kia": "Kia",
    "subaru": "Subaru",
    "mitsubishi": "Mitsubishi",
    "ford": "Ford",
    "porsche": "Porsche",
    "volvo": "Volvo",
    "land rover": "Land Rover",
    "jaguar": "Jaguar",
    "peugeot": "Peugeot",
    "isuzu": "Isuzu",
    "chery": "Chery",
    "haval": "Haval",
    "ora": "Ora",
    "byd": "BYD",
    "rolls-royce": "Rolls-Royce",
    "bentley": "Bentley",
    "maserati": "Maserati",
    "infiniti": "Infiniti",
    "jeep": "Jeep",
    "chevrolet": "Chevrolet",
    "alfa": "Alfa Romeo",
    "alfa romeo": "Alfa Romeo",
    "renault": "Renault",
    "citroen": "Citroen",
    "ssangyong": "SsangYong",
    "fiat": "Fiat",
    "daihatsu": "Daihatsu",
    "smart": "Smart",
    "tesla": "Tesla",
    "mg": "MG",
    "neta": "Neta",
    "changan": "Changan",
    "gac": "GAC",
    "geely": "Geely",
    "great": "Great Wall",
    "great wall": "Great Wall",
}

# read-only for the life of the process
KNOWN_BRANDS = MappingProxyType(_BRANDS)

YEAR_RE = re.compile(r"^(\d{4})\s+")
# engine size and transmission: "2.0 Manual", "1.5 J Auto"
# trim words only follow a decimal engine size, "Mazda 2 Hatchback Auto" keeps its model
VARIANT_RE = re.compile(
    r"\s+(\d+\.\d+(?:\s+[A-Za-z]\S*){0,3}?\s+(?:Auto|Manual)|\d+\s+(?:Auto|Manual))\s*$",
    re.IGNORECASE,
)
NO_VARIANT_RE = re.compile(r"\bno variant\b", re.IGNORECASE)
DIGITS_RE = re.compile(r"\d+")
LEADING_INT_RE = re.compile(r"^[+-]?\d+")


class Description(NamedTuple):
    year: int
    brand: str
    model: str
    variant: str


def normalize_brand(raw: str) -> str:
    """Canonical spelling for a brand token, e.g. ``"mercedes-benz"`` -> ``"Mercedes-Benz"``."""
    lower = raw.lower()
    known = KNOWN_BRANDS.get(lower)
    if known:
        return known
    return raw[:1].upper() + raw[1:].lower()


def title_case(text: str) -> str:
    words = []
    for word in text.split(" "):
        if not word:
            words.append(word)
        elif word == word.upper() and len(word) <= 4:
            # abbreviations such as GT, SE, AMG
            words.append(word)
        else:
            words.append(word[:1].upper() + word[1:])
    return " ".join(words)


def parse_year_brand_model_variant(raw: str) -> Description:
    """Split a listing description such as ``"2015 Toyota Vios 1.5 J Auto"``.

    Descriptions that do not start with a four-digit year are not parsed any
    further: the whole text becomes the model.
    """
    trimmed = str(raw).strip()

    year_match = YEAR_RE.match(trimmed)
    if not year_match:
        return Description(0, "", trimmed, "")
    year = int(year_match.group(1))
    rest = trimmed[year_match.end():]

    variant = ""
    variant_match = VARIANT_RE.search(rest)
    if variant_match:
        variant = variant_match.group(1)
        rest = rest[:variant_match.start()]

    brand = ""
    model = rest
    parts = rest.split(None, 1)
    if parts:
        brand = normalize_brand(parts[0])
        model = parts[1].strip() if len(parts) > 1 else ""

    model = NO_VARIANT_RE.sub("", model).strip()
    model = re.sub(r"\s+", " ", model)
    return Description(year, brand, title_case(model), variant)


def _is_number(raw: Any) -> bool:
    return isinstance(raw, (int, float)) and not isinstance(raw, bool)


def parse_mileage(raw: Any) -> int:
    if _is_number(raw):
        return max(int(raw), 0) if math.isfinite(raw) else 0
    if raw is None:
        return 0
    cleaned = (
        str(raw)
        .replace(NBSP, "")
        .replace(",", "")
    )
    cleaned = re.sub(r"km", "", cleaned, flags=re.IGNORECASE).strip()
    match = LEADING_INT_RE.match(cleaned)
    if not match:
        return 0
    return max(int(match.group(0)), 0)


def parse_listing_id(raw: Any) -> str:
    """Numeric part of a listing id cell; ``"High Risk 2098229"`` -> ``"2098229"``."""
    if isinstance(raw, float) and raw.is_integer():
        raw = int(raw)
    text = str(raw).strip()
    match = DIGITS_RE.search(text)
    return match.group(0) if match else text


def parse_location(raw: Any) -> str:
    if raw is None:
        return ""
    return str(raw).replace(NBSP, "").strip()


def parse_amount(raw: Any) -> float:
    """Price, bid or bidder cell as a non-negative number; ``"-"`` and junk give 0."""
    if _is_number(raw):
        return raw if math.isfinite(raw) and raw > 0 else 0
    if raw is None:
        return 0
    text = str(raw).replace(NBSP, "").replace(",", "").strip()
    if text.upper().startswith("RM"):
        text = text[2:].strip()
    if not text or text == "-":
        return 0
    try:
        value = float(text)
    except ValueError:
        return 0
    if not math.isfinite(value) or value < 0:
        return 0
    return int(value) if value.is_integer() else value
