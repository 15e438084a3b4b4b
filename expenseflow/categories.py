"""Known expense categories with display metadata.

Transactions store the category as free text. Names that match a known
category resolve to its enum member; anything else resolves to a
``CustomCategory`` carrying the raw name and the fallback colour and icon.
"""
from dataclasses import dataclass
from enum import Enum

DEFAULT_COLOR = "#6b7280"
DEFAULT_ICON = "📦"


class Category(Enum):
    FOOD = ("food", "Food", "#ef4444", "🍽️")
    TRANSPORT = ("transport", "Transport", "#06b6d4", "🚗")
    SHOPPING = ("shopping", "Shopping", "#3b82f6", "🛍️")
    BILLS = ("bills", "Bills", "#10b981", "📄")
    ENTERTAINMENT = ("entertainment", "Entertainment", "#f59e0b", "🎬")
    MEDICAL = ("medical", "Medical", "#ec4899", "🏥")
    EDUCATION = ("education", "Education", "#8b5cf6", "📚")
    OTHER = ("other", "Other", DEFAULT_COLOR, DEFAULT_ICON)

    def __init__(self, slug, label, color, icon):
        self.slug = slug
        self.label = label
        self.color = color
        self.icon = icon

    @property
    def known(self):
        return True

    def to_dict(self):
        return {"id": self.slug, "name": self.label, "color": self.color, "icon": self.icon, "known": True}


@dataclass(frozen=True)
class CustomCategory:
    label: str
    color: str = DEFAULT_COLOR
    icon: str = DEFAULT_ICON

    @property
    def known(self):
        return False

    def to_dict(self):
        return {"id": None, "name": self.label, "color": self.color, "icon": self.icon, "known": False}


DEFAULT_CATEGORIES = [c.label for c in Category]
_BY_LABEL = {c.label: c for c in Category}


def resolve_category(name):
    """Return the known ``Category`` for an exact name, else a ``CustomCategory``."""
    return _BY_LABEL.get(name) or CustomCategory(name)
