"""
Catalog vocabulary shared by the message router, the search fallback chain
and category browsing. One list per purpose, kept in one place.
"""

# Words that trigger a direct catalog lookup from a chat message
SEARCH_TERMS: tuple[str, ...] = ("laptop", "chair", "printer", "paper", "pen", "mouse")

# Vendors recognised in comparison requests ("compare dell and lenovo")
BRAND_TERMS: tuple[str, ...] = ("dell", "lenovo", "acer", "hp", "apple", "microsoft", "lg", "samsung")

# Last-resort category words for the search fallback chain
CATEGORY_FALLBACK_WORDS: tuple[str, ...] = (
    "laptop", "computer", "chair", "desk", "printer", "monitor",
    "keyboard", "mouse", "pen", "paper", "notebook", "headset",
    "webcam", "cable", "storage", "tablet", "phone", "speaker",
)

# Request words that never name a product ("show me something for my desk")
FILLER_WORDS: frozenset[str] = frozenset(
    {"looking", "need", "want", "show", "find", "something", "please", "some", "with", "that", "this", "what", "have"}
)

# Browse slugs: category substrings and title words that belong to each slug
BROWSE_CATEGORIES: dict[str, dict] = {
    "tech-electronics": {
        "name": "Tech & Electronics",
        "categories": ["Electronics", "Technology", "Computer"],
        "title_words": ["laptop", "computer", "tablet", "monitor", "printer", "mouse", "keyboard"],
    },
    "office-supplies": {
        "name": "Office Supplies",
        "categories": ["Office"],
        "title_words": ["pen", "paper", "notebook", "binder", "stapler"],
    },
    "furniture": {
        "name": "Furniture",
        "categories": ["Furniture"],
        "title_words": ["chair", "desk", "table", "cabinet"],
    },
}

BROWSE_OPTIONS: tuple[dict, ...] = (
    {"label": "Office Supplies", "value": "office", "icon": "📎"},
    {"label": "Technology", "value": "tech", "icon": "💻"},
    {"label": "Furniture", "value": "furniture", "icon": "🪑"},
    {"label": "Printers", "value": "printers", "icon": "🖨️"},
)

GREETING_PROMPTS: tuple[dict, ...] = (
    {"id": "prompt-1", "text": "Find me a laptop", "icon": "💻"},
    {"id": "prompt-2", "text": "Show me office chairs", "icon": "🪑"},
    {"id": "prompt-3", "text": "Browse categories", "icon": "📋"},
)

# Ordered: the first key contained in a category wins
CATEGORY_ICONS: dict[str, str] = {
    "desk": "🪑",
    "chair": "🪑",
    "laptop": "💻",
    "computer": "💻",
    "monitor": "🖥️",
    "keyboard": "⌨️",
    "mouse": "🖱️",
    "printer": "🖨️",
    "storage": "💾",
    "stationery": "📎",
    "supplies": "📎",
    "technology": "💻",
    "tech": "💻",
    "furniture": "🪑",
    "headphones": "🎧",
    "webcam": "📷",
}

DEFAULT_ICON = "📦"


def icon_for(category: str) -> str:
    lowered = category.lower()
    for key, icon in CATEGORY_ICONS.items():
        if key in lowered:
            return icon
    return DEFAULT_ICON
