"""Country code to country name lookup for providers that only return codes."""

from types import MappingProxyType
from typing import Optional

COUNTRY_NAMES = MappingProxyType({
    "us": "United States", "uk": "United Kingdom", "gb": "United Kingdom",
    "ca": "Canada", "de": "Germany", "fr": "France", "es": "Spain",
    "it": "Italy", "nl": "Netherlands", "pl": "Poland", "in": "India",
    "au": "Australia", "br": "Brazil", "mx": "Mexico", "ar": "Argentina",
    "co": "Colombia", "pe": "Peru", "cl": "Chile", "jp": "Japan",
    "cn": "China", "sg": "Singapore", "my": "Malaysia", "th": "Thailand",
    "vn": "Vietnam", "id": "Indonesia", "ph": "Philippines",
    "za": "South Africa", "eg": "Egypt", "ma": "Morocco", "tn": "Tunisia",
    "ke": "Kenya", "ng": "Nigeria", "se": "Sweden", "no": "Norway",
    "dk": "Denmark", "fi": "Finland", "at": "Austria", "ch": "Switzerland",
    "be": "Belgium", "pt": "Portugal", "ie": "Ireland",
    "cz": "Czech Republic", "hu": "Hungary", "ro": "Romania",
    "bg": "Bulgaria", "hr": "Croatia", "sk": "Slovakia", "si": "Slovenia",
    "lt": "Lithuania", "lv": "Latvia", "ee": "Estonia", "ua": "Ukraine",
    "ru": "Russia", "tr": "Turkey", "il": "Israel",
    "ae": "United Arab Emirates", "sa": "Saudi Arabia", "qa": "Qatar",
    "kw": "Kuwait", "bh": "Bahrain", "om": "Oman", "kr": "South Korea",
    "tw": "Taiwan", "hk": "Hong Kong", "nz": "New Zealand",
})


def country_name(code: Optional[str]) -> Optional[str]:
    """
    Resolve a country code to a readable name.

    Unknown codes are returned upper-cased so the location still renders.

    Examples:
        >>> country_name("de")
        'Germany'
        >>> country_name("zz")
        'ZZ'
    """
    if not code or not code.strip():
        return None
    code = code.strip()
    return COUNTRY_NAMES.get(code.lower(), code.upper())
