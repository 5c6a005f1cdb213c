"""
Static navigation data for the Babylonian Talmud.
Folio ranges follow the standard Vilna edition.
"""

from typing import Any, Dict, List, Tuple

# tractate -> (first folio, last folio), seder
TALMUD_BAVLI_TRACTATES: Dict[str, Dict[str, Any]] = {
    # Seder Zeraim
    "Berakhot": {"pages": (2, 64), "order": "Zeraim", "he_name": "ברכות"},

    # Seder Moed
    "Shabbat": {"pages": (2, 157), "order": "Moed", "he_name": "שבת"},
    "Eruvin": {"pages": (2, 105), "order": "Moed", "he_name": "עירובין"},
    "Pesachim": {"pages": (2, 121), "order": "Moed", "he_name": "פסחים"},
    "Shekalim": {"pages": (2, 22), "order": "Moed", "he_name": "שקלים"},
    "Yoma": {"pages": (2, 88), "order": "Moed", "he_name": "יומא"},
    "Sukkah": {"pages": (2, 56), "order": "Moed", "he_name": "סוכה"},
    "Beitzah": {"pages": (2, 40), "order": "Moed", "he_name": "ביצה"},
    "Rosh Hashanah": {"pages": (2, 35), "order": "Moed", "he_name": "ראש השנה"},
    "Taanit": {"pages": (2, 31), "order": "Moed", "he_name": "תענית"},
    "Megillah": {"pages": (2, 32), "order": "Moed", "he_name": "מגילה"},
    "Moed Katan": {"pages": (2, 29), "order": "Moed", "he_name": "מועד קטן"},
    "Chagigah": {"pages": (2, 27), "order": "Moed", "he_name": "חגיגה"},

    # Seder Nashim
    "Yevamot": {"pages": (2, 122), "order": "Nashim", "he_name": "יבמות"},
    "Ketubot": {"pages": (2, 112), "order": "Nashim", "he_name": "כתובות"},
    "Nedarim": {"pages": (2, 91), "order": "Nashim", "he_name": "נדרים"},
    "Nazir": {"pages": (2, 66), "order": "Nashim", "he_name": "נזיר"},
    "Sotah": {"pages": (2, 49), "order": "Nashim", "he_name": "סוטה"},
    "Gittin": {"pages": (2, 90), "order": "Nashim", "he_name": "גיטין"},
    "Kiddushin": {"pages": (2, 82), "order": "Nashim", "he_name": "קידושין"},

    # Seder Nezikin
    "Bava Kamma": {"pages": (2, 119), "order": "Nezikin", "he_name": "בבא קמא"},
    "Bava Metzia": {"pages": (2, 119), "order": "Nezikin", "he_name": "בבא מציעא"},
    "Bava Batra": {"pages": (2, 176), "order": "Nezikin", "he_name": "בבא בתרא"},
    "Sanhedrin": {"pages": (2, 113), "order": "Nezikin", "he_name": "סנהדרין"},
    "Makkot": {"pages": (2, 24), "order": "Nezikin", "he_name": "מכות"},
    "Shevuot": {"pages": (2, 49), "order": "Nezikin", "he_name": "שבועות"},
    "Avodah Zarah": {"pages": (2, 76), "order": "Nezikin", "he_name": "עבודה זרה"},
    "Horayot": {"pages": (2, 14), "order": "Nezikin", "he_name": "הוריות"},

    # Seder Kodashim
    "Zevachim": {"pages": (2, 120), "order": "Kodashim", "he_name": "זבחים"},
    "Menachot": {"pages": (2, 110), "order": "Kodashim", "he_name": "מנחות"},
    "Chullin": {"pages": (2, 142), "order": "Kodashim", "he_name": "חולין"},
    "Bekhorot": {"pages": (2, 61), "order": "Kodashim", "he_name": "בכורות"},
    "Arakhin": {"pages": (2, 34), "order": "Kodashim", "he_name": "ערכין"},
    "Temurah": {"pages": (2, 34), "order": "Kodashim", "he_name": "תמורה"},
    "Keritot": {"pages": (2, 28), "order": "Kodashim", "he_name": "כריתות"},
    "Meilah": {"pages": (2, 22), "order": "Kodashim", "he_name": "מעילה"},
    "Tamid": {"pages": (25, 33), "order": "Kodashim", "he_name": "תמיד"},

    # Seder Tohorot
    "Niddah": {"pages": (2, 73), "order": "Tohorot", "he_name": "נדה"},
}

TALMUD_ORDERS: List[str] = ["Zeraim", "Moed", "Nashim", "Nezikin", "Kodashim", "Tohorot"]


def folio_range(tractate_name: str) -> Tuple[int, int]:
    """Return ``(first_folio, last_folio)`` for a tractate."""
    return TALMUD_BAVLI_TRACTATES[tractate_name]["pages"]


def get_tractates_by_order(order_name: str) -> List[str]:
    """Return the tractates of one seder, in print order."""
    return [
        tractate for tractate, info in TALMUD_BAVLI_TRACTATES.items()
        if info["order"] == order_name
    ]
