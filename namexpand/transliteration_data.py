"""
Static transliteration rules for author names.

Each key is a grapheme (or ascii digraph) and each value lists the alternative
spellings that represent the same sound, in rule-table order. Variant
generation substitutes alternatives in exactly this order, so the order here
decides which variants survive the variant cap.
"""

from types import MappingProxyType

# ════════════════════════════════════════════════════════════════════════════════
# GERMANIC / SCANDINAVIAN
# ════════════════════════════════════════════════════════════════════════════════

_GERMANIC = {
    "ü": ("u", "ue"),
    "ö": ("o", "oe"),
    "ä": ("a", "ae"),
    "ß": ("ss",),
    "å": ("a", "aa"),
    "ø": ("o", "oe"),
    "æ": ("ae",),
    "œ": ("oe",),
}

# ════════════════════════════════════════════════════════════════════════════════
# SLAVIC / BALTIC / HUNGARIAN
# ════════════════════════════════════════════════════════════════════════════════

_CENTRAL_EUROPEAN = {
    "č": ("c", "ch"),
    "ć": ("c", "ch"),
    "š": ("s", "sh"),
    "ś": ("s",),
    "ž": ("z", "zh"),
    "ź": ("z",),
    "ż": ("z",),
    "ř": ("r", "rz"),
    "ł": ("l",),
    "ń": ("n",),
    "ň": ("n",),
    "ě": ("e",),
    "ę": ("e",),
    "ą": ("a",),
    "ď": ("d",),
    "đ": ("d", "dj"),
    "ť": ("t",),
    "ů": ("u",),
    "ő": ("o", "oe"),
    "ű": ("u", "ue"),
}

# ════════════════════════════════════════════════════════════════════════════════
# ROMANCE / TURKISH / GENERIC ACCENTS
# ════════════════════════════════════════════════════════════════════════════════

_ACCENTS = {
    "á": ("a",),
    "à": ("a",),
    "â": ("a",),
    "ã": ("a",),
    "é": ("e",),
    "è": ("e",),
    "ê": ("e",),
    "ë": ("e",),
    "í": ("i",),
    "ì": ("i",),
    "î": ("i",),
    "ï": ("i",),
    "ı": ("i",),
    "ó": ("o",),
    "ò": ("o",),
    "ô": ("o",),
    "õ": ("o",),
    "ú": ("u",),
    "ù": ("u",),
    "û": ("u",),
    "ý": ("y",),
    "ÿ": ("y",),
    "ç": ("c",),
    "ñ": ("n", "ny"),
    "ğ": ("g",),
    "ş": ("s", "sh"),
    "ș": ("s", "sh"),
    "ţ": ("t",),
    "ț": ("t",),
}

# ════════════════════════════════════════════════════════════════════════════════
# ASCII DIGRAPHS (upgrades - only kept by the corpus scan when indexed)
# ════════════════════════════════════════════════════════════════════════════════

_ASCII_DIGRAPHS = {
    "ue": ("ü",),
    "oe": ("ö",),
    "ae": ("ä",),
    "ss": ("ß",),
    "ch": ("č",),
}

TRANSLITERATION_RULES = MappingProxyType({**_GERMANIC, **_CENTRAL_EUROPEAN, **_ACCENTS, **_ASCII_DIGRAPHS})

MAX_RULE_LENGTH = max(len(key) for key in TRANSLITERATION_RULES)
