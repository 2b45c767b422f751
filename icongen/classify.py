import re
from dataclasses import dataclass
from typing import Any, Literal, Optional

Kind = Literal["spell", "item"]

KNOWN_ITEM_TYPES = {
    "weapon",
    "armor",
    "shield",
    "cloak",
    "robe",
    "boots",
    "helm",
    "helmet",
    "ring",
    "amulet",
    "staff",
    "wand",
}

# Order matters: the first matching pattern wins.
NAME_PATTERNS = [
    (re.compile(r"weapon|sword|blade|dagger|axe|hammer|mace|spear|bow|crossbow|flail|halberd"), "weapon"),
    (re.compile(r"shield|buckler"), "shield"),
    (re.compile(r"armor|breastplate|cuirass|chainmail|mail|plate|hauberk"), "armor"),
    (re.compile(r"helm|helmet|hood"), "helmet"),
    (re.compile(r"cloak|cape|mantle"), "cloak"),
    (re.compile(r"robe|vestment|tunic"), "robe"),
    (re.compile(r"boots|shoes|greaves"), "boots"),
    (re.compile(r"gloves|gauntlets"), "gloves"),
    (re.compile(r"ring"), "ring"),
    (re.compile(r"amulet|pendant|necklace"), "amulet"),
    (re.compile(r"staff"), "staff"),
    (re.compile(r"wand"), "wand"),
    (re.compile(r"tome|grimoire|book"), "book"),
    (re.compile(r"scroll"), "scroll"),
    (re.compile(r"potion|elixir|vial"), "potion"),
]

DEFAULT_CATEGORY = "item"


@dataclass(frozen=True)
class Classification:
    kind: Kind
    category: Optional[str] = None

    @property
    def icon_dir(self) -> str:
        return "spells" if self.kind == "spell" else "items"


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def is_spell(doc: Any) -> bool:
    if not isinstance(doc, dict):
        return False
    return _text(doc.get("type")).lower() == "spell"


def is_likely_record(doc: Any) -> bool:
    """True for pack entries that look like a named document."""
    if not isinstance(doc, dict):
        return False
    name = doc.get("name")
    return isinstance(name, str) and bool(name.strip())


def detect_item_category(doc: dict) -> str:
    """
    Best-effort item category detection.

    An explicit, recognised `type` wins; otherwise the lower-cased name is
    matched against NAME_PATTERNS as plain substrings.
    """
    name = _text(doc.get("name")).lower()
    item_type = _text(doc.get("type")).lower()

    if item_type and item_type != "spell" and item_type in KNOWN_ITEM_TYPES:
        return item_type

    for pattern, category in NAME_PATTERNS:
        if pattern.search(name):
            return category
    return DEFAULT_CATEGORY


def classify(doc: dict) -> Classification:
    if is_spell(doc):
        return Classification(kind="spell")
    return Classification(kind="item", category=detect_item_category(doc))
