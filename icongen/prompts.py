from typing import Optional

from .classify import classify

NO_TEXT = "NO TEXT, no letters, no numbers, no watermark, no logo"
COMPOSITION = "clean composition, centered subject"

PROOF_STYLE = "High-fantasy painted icon illustration."
PROOF_FOOTER = [
    "Centered composition, readable silhouette, strong contrast.",
    "No text, no letters, no numbers, no borders, no frames.",
    "Simple background (vignette/gradient ok).",
    "1024x1024.",
]


def build_prompt(doc: dict) -> str:
    """
    Build the icon prompt for a pack record.

    Spells get the fixed spell template; everything else is phrased around
    the detected item category ("single <category> on parchment background").
    """
    name = doc["name"].strip()
    classification = classify(doc)

    if classification.kind == "spell":
        return ", ".join(
            [
                "fantasy spell concept art",
                "single spell icon on parchment background",
                f"magical spell: {name}",
                COMPOSITION,
                NO_TEXT,
            ]
        )

    label = classification.category
    return ", ".join(
        [
            f"fantasy {label} concept art",
            f"single {label} on parchment background",
            name,
            COMPOSITION,
            NO_TEXT,
        ]
    )


def build_proof_spell_prompt(name: str, school: Optional[str] = None, rank: Optional[int] = None) -> str:
    school = school or "General"
    rank = 0 if rank is None else rank
    return " ".join(
        [
            PROOF_STYLE,
            f"Spell: {name}. Representing {school} magic, rank {rank}.",
            "Depict one evocative magical moment/object that implies the spell.",
            *PROOF_FOOTER,
        ]
    )


def build_proof_item_prompt(name: str) -> str:
    return " ".join(
        [
            PROOF_STYLE,
            f"Item: {name}. Depict the item clearly as a single object.",
            "Add magical glow/details if appropriate.",
            *PROOF_FOOTER,
        ]
    )
