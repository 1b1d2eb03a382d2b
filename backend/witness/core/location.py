"""Location normalisation for Iranian administrative regions.

Records store a free-text location plus optional province / city fields.
Aggregations map each record onto one of the 31 provinces, identified by
its ISO 3166-2 code.
"""

from typing import Optional

PROVINCE_TO_ISO: dict[str, str] = {
    "Tehran": "IR-23",
    "Isfahan": "IR-10",
    "Fars": "IR-07",
    "Khuzestan": "IR-06",
    "Razavi Khorasan": "IR-09",
    "East Azerbaijan": "IR-03",
    "West Azerbaijan": "IR-04",
    "Kermanshah": "IR-05",
    "Kerman": "IR-08",
    "Gilan": "IR-01",
    "Mazandaran": "IR-02",
    "Sistan and Baluchestan": "IR-11",
    "Kurdistan": "IR-12",
    "Hormozgan": "IR-22",
    "Hamadan": "IR-13",
    "Yazd": "IR-21",
    "Ardabil": "IR-24",
    "Markazi": "IR-00",
    "Lorestan": "IR-15",
    "Bushehr": "IR-18",
    "Zanjan": "IR-19",
    "Semnan": "IR-20",
    "Ilam": "IR-16",
    "Kohgiluyeh and Boyer-Ahmad": "IR-17",
    "Qazvin": "IR-26",
    "Golestan": "IR-27",
    "Qom": "IR-25",
    "North Khorasan": "IR-28",
    "South Khorasan": "IR-29",
    "Alborz": "IR-30",
    "Chaharmahal and Bakhtiari": "IR-14",
}

# Longest names first so "Kermanshah" wins over "Kerman" and
# "Razavi Khorasan" over a bare "Khorasan" substring.
_MATCH_ORDER = sorted(PROVINCE_TO_ISO, key=len, reverse=True)


def format_location(province: Optional[str] = None, city: Optional[str] = None) -> str:
    """Compose ``"<province> - <city>"`` from whichever parts are present."""
    clean_province = (province or "").strip()
    clean_city = (city or "").strip()
    if clean_province and clean_city:
        return f"{clean_province} - {clean_city}"
    return clean_province or clean_city


def extract_province(location: Optional[str]) -> Optional[str]:
    """Find the province named in a free-text location, case-insensitively."""
    if not location:
        return None
    lowered = location.lower()
    for province in _MATCH_ORDER:
        if province.lower() in lowered:
            return province
    return None


def region_code(province: Optional[str], location: Optional[str]) -> Optional[str]:
    """ISO code for a record: the explicit province field first, then the location text."""
    for candidate in (province, location):
        match = extract_province(candidate)
        if match:
            return PROVINCE_TO_ISO[match]
    return None
