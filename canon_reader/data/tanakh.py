"""
Static navigation data for the Tanakh.
Standard 24-book structure, in canonical Hebrew order.
"""

from typing import Any, Dict, List

# book -> chapter count, section and canonical position
TANAKH_BOOKS: Dict[str, Dict[str, Any]] = {
    # Torah
    "Genesis": {"chapters": 50, "section": "Torah", "he_name": "בראשית", "order": 1},
    "Exodus": {"chapters": 40, "section": "Torah", "he_name": "שמות", "order": 2},
    "Leviticus": {"chapters": 27, "section": "Torah", "he_name": "ויקרא", "order": 3},
    "Numbers": {"chapters": 36, "section": "Torah", "he_name": "במדבר", "order": 4},
    "Deuteronomy": {"chapters": 34, "section": "Torah", "he_name": "דברים", "order": 5},

    # Nevi'im - former prophets
    "Joshua": {"chapters": 24, "section": "Nevi'im", "he_name": "יהושע", "order": 6},
    "Judges": {"chapters": 21, "section": "Nevi'im", "he_name": "שופטים", "order": 7},
    "I Samuel": {"chapters": 31, "section": "Nevi'im", "he_name": "שמואל א", "order": 8},
    "II Samuel": {"chapters": 24, "section": "Nevi'im", "he_name": "שמואל ב", "order": 9},
    "I Kings": {"chapters": 22, "section": "Nevi'im", "he_name": "מלכים א", "order": 10},
    "II Kings": {"chapters": 25, "section": "Nevi'im", "he_name": "מלכים ב", "order": 11},

    # Nevi'im - latter prophets
    "Isaiah": {"chapters": 66, "section": "Nevi'im", "he_name": "ישעיהו", "order": 12},
    "Jeremiah": {"chapters": 52, "section": "Nevi'im", "he_name": "ירמיהו", "order": 13},
    "Ezekiel": {"chapters": 48, "section": "Nevi'im", "he_name": "יחזקאל", "order": 14},
    "Hosea": {"chapters": 14, "section": "Nevi'im", "he_name": "הושע", "order": 15},
    "Joel": {"chapters": 4, "section": "Nevi'im", "he_name": "יואל", "order": 16},
    "Amos": {"chapters": 9, "section": "Nevi'im", "he_name": "עמוס", "order": 17},
    "Obadiah": {"chapters": 1, "section": "Nevi'im", "he_name": "עובדיה", "order": 18},
    "Jonah": {"chapters": 4, "section": "Nevi'im", "he_name": "יונה", "order": 19},
    "Micah": {"chapters": 7, "section": "Nevi'im", "he_name": "מיכה", "order": 20},
    "Nahum": {"chapters": 3, "section": "Nevi'im", "he_name": "נחום", "order": 21},
    "Habakkuk": {"chapters": 3, "section": "Nevi'im", "he_name": "חבקוק", "order": 22},
    "Zephaniah": {"chapters": 3, "section": "Nevi'im", "he_name": "צפניה", "order": 23},
    "Haggai": {"chapters": 2, "section": "Nevi'im", "he_name": "חגי", "order": 24},
    "Zechariah": {"chapters": 14, "section": "Nevi'im", "he_name": "זכריה", "order": 25},
    "Malachi": {"chapters": 3, "section": "Nevi'im", "he_name": "מלאכי", "order": 26},

    # Ketuvim
    "Psalms": {"chapters": 150, "section": "Ketuvim", "he_name": "תהלים", "order": 27},
    "Proverbs": {"chapters": 31, "section": "Ketuvim", "he_name": "משלי", "order": 28},
    "Job": {"chapters": 42, "section": "Ketuvim", "he_name": "איוב", "order": 29},
    "Song of Songs": {"chapters": 8, "section": "Ketuvim", "he_name": "שיר השירים", "order": 30},
    "Ruth": {"chapters": 4, "section": "Ketuvim", "he_name": "רות", "order": 31},
    "Lamentations": {"chapters": 5, "section": "Ketuvim", "he_name": "איכה", "order": 32},
    "Ecclesiastes": {"chapters": 12, "section": "Ketuvim", "he_name": "קהלת", "order": 33},
    "Esther": {"chapters": 10, "section": "Ketuvim", "he_name": "אסתר", "order": 34},
    "Daniel": {"chapters": 12, "section": "Ketuvim", "he_name": "דניאל", "order": 35},
    "Ezra": {"chapters": 10, "section": "Ketuvim", "he_name": "עזרא", "order": 36},
    "Nehemiah": {"chapters": 13, "section": "Ketuvim", "he_name": "נחמיה", "order": 37},
    "I Chronicles": {"chapters": 29, "section": "Ketuvim", "he_name": "דברי הימים א", "order": 38},
    "II Chronicles": {"chapters": 36, "section": "Ketuvim", "he_name": "דברי הימים ב", "order": 39},
}

# Alternative spellings people type into the omnibar
TANAKH_ALIASES: Dict[str, str] = {
    "bereshit": "Genesis",
    "bereishit": "Genesis",
    "shemot": "Exodus",
    "vayikra": "Leviticus",
    "bamidbar": "Numbers",
    "devarim": "Deuteronomy",
    "song of solomon": "Song of Songs",
    "shir hashirim": "Song of Songs",
    "tehillim": "Psalms",
    "mishlei": "Proverbs",
    "kohelet": "Ecclesiastes",
    "1 samuel": "I Samuel",
    "2 samuel": "II Samuel",
    "1 kings": "I Kings",
    "2 kings": "II Kings",
    "1 chronicles": "I Chronicles",
    "2 chronicles": "II Chronicles",
}


def get_all_books() -> List[str]:
    """Return every Tanakh book in canonical order."""
    return [book for book, _ in sorted(TANAKH_BOOKS.items(), key=lambda item: item[1]["order"])]
