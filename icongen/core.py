import hashlib
import re
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Callable, List, Optional, Sequence

from .classify import classify, is_likely_record
from .config import Settings
from .errors import ConfigurationError, FileSystemError
from .generator import ICON_SIZE, PROOF_ICON_SIZE, ImageGenerator
from .packs import find_record_by_name, list_pack_files, load_pack, save_pack
from .prompts import build_proof_item_prompt, build_proof_spell_prompt, build_prompt


PROOF_SPELLS = [
    "Animal Whispers",
    "Beast Sense",
    "Acid Splash",
    "Barkskin",
    "Aid",
    "Cause Fear",
    "Bane",
    "Null Step",
    "Chill of Nothing",
    "Chronomage: Delay Harm",
]

PROOF_ITEMS = [
    "Weapon of the Adept",
    "Flamebound Weapon",
    "Robe of the Arcanist",
    "Cloak of Warding",
    "Grimoire of Practical Evocations",
]

PROOF_DELAY_SECONDS = 0.45


def sanitize_file_name(name: str) -> str:
    slug = str(name or "").strip().lower()
    slug = re.sub(r"['\"]", "", slug)
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    return slug.strip("-")[:120]


def slugify(name: str) -> str:
    slug = re.sub(r"['’]", "", str(name).lower())
    return re.sub(r"[^a-z0-9]+", "-", slug).strip("-")


def short_hash(value: str) -> str:
    return hashlib.sha1(str(value).encode("utf-8")).hexdigest()[:8]


def stable_icon_file_name(doc: dict) -> str:
    """
    File name that stays the same across runs: "<slug>-<hash>.png".

    The hash is taken from `_id` when present so same-named records in
    different packs do not collide.
    """
    base = sanitize_file_name(doc.get("name") or "icon")
    key = doc.get("_id")
    if key is None:
        key = doc.get("name")
    suffix = short_hash(key)
    return f"{base}-{suffix}.png" if base else f"{suffix}.png"


def foundry_img_path(module_id: str, kind: str, file_name: str) -> str:
    rel = PurePosixPath("icons", "generated", kind, file_name)
    return f"modules/{module_id}/{rel}"


def write_icon(path: Path, data: bytes) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as err:
        raise FileSystemError(f"Could not write icon {path}: {err}") from err


@dataclass
class PackResult:
    processed: int = 0
    changed: int = 0
    total: int = 0


@dataclass
class RunSummary:
    packs: int = 0
    processed: int = 0
    changed: int = 0


class IconPipeline:
    """
    Orchestrates icon generation for every pack under packs/:
    - load each pack (array or line-delimited JSON)
    - for each record, up to the per-pack limit:
        * skip it when its img already points at an existing generated icon
        * otherwise build a prompt, call the generator and save the PNG
        * point the record's img at the new icon
    - rewrite a pack once, and only if one of its records changed
    """

    def __init__(self, settings: Settings, generator: ImageGenerator, module_id: str) -> None:
        self.settings = settings
        self.generator = generator
        self.module_id = module_id

    def _rel(self, path: Path) -> str:
        try:
            return str(path.relative_to(self.settings.root))
        except ValueError:
            return str(path)

    def run(self) -> RunSummary:
        settings = self.settings
        print(f"Module ID: {self.module_id}")
        print(f"SD_API: {settings.sd_api}")
        print(
            f"DRYRUN={settings.dry_run} OVERWRITE={settings.overwrite} "
            f"LIMIT={settings.describe_limit()}"
        )

        pack_files = list_pack_files(settings.packs_dir)
        print(f"Found {len(pack_files)} pack(s) under ./packs")

        summary = RunSummary(packs=len(pack_files))
        for pack_path in pack_files:
            print(f"\n=== Processing pack: {self._rel(pack_path)} ===")
            result = self.process_pack(pack_path)
            print(
                f"Pack done. processed={result.processed} changed={result.changed} "
                f"docs={result.total}"
            )
            summary.processed += result.processed
            summary.changed += result.changed

        print(f"\nALL DONE. processed={summary.processed} changed={summary.changed}")
        if settings.dry_run:
            print("DRYRUN was enabled: no files or pack entries were written.")
        return summary

    def process_pack(self, pack_path: Path) -> PackResult:
        settings = self.settings
        docs, fmt = load_pack(pack_path)
        result = PackResult(total=len(docs))

        for doc in docs:
            if result.processed >= settings.limit:
                break
            if not is_likely_record(doc):
                continue

            kind = classify(doc).icon_dir
            file_name = stable_icon_file_name(doc)
            disk_path = settings.icons_dir / kind / file_name
            img_path = foundry_img_path(self.module_id, kind, file_name)

            already_ok = doc.get("img") == img_path and disk_path.exists()
            if already_ok and not settings.overwrite:
                result.processed += 1
                continue

            prompt = build_prompt(doc)
            print(f"\n[{kind}] {doc['name']}")
            print(f" pack: {self._rel(pack_path)}")
            print(f" img : {img_path}")
            print(f" file: {self._rel(disk_path)}")
            print(f" prompt: {prompt}")

            if not settings.dry_run:
                png = self.generator.generate(prompt, ICON_SIZE)
                write_icon(disk_path, png)
                doc["img"] = img_path
                result.changed += 1

            result.processed += 1

        if not settings.dry_run and result.changed > 0:
            save_pack(pack_path, docs, fmt)

        return result


@dataclass
class ProofUpdate:
    kind: str
    pack: str
    name: str
    img: str


@dataclass
class _LoadedPack:
    path: Path
    docs: list
    fmt: str
    dirty: bool = False


@dataclass
class ProofIconPipeline:
    """
    Generate showcase icons for a hand-picked list of spells and items.

    Spells are looked up in spells.db, then cantrips.db; items in items.db.
    Names that are not found are reported and skipped.
    """

    settings: Settings
    generator: ImageGenerator
    module_id: str
    spells: Sequence[str] = field(default_factory=lambda: list(PROOF_SPELLS))
    items: Sequence[str] = field(default_factory=lambda: list(PROOF_ITEMS))
    delay: float = PROOF_DELAY_SECONDS
    sleep: Optional[Callable[[float], None]] = None

    def _load(self, file_name: str) -> _LoadedPack:
        path = self.settings.packs_dir / file_name
        if not path.exists():
            raise ConfigurationError(f"packs/{file_name} not found.")
        docs, fmt = load_pack(path)
        return _LoadedPack(path=path, docs=docs, fmt=fmt)

    def run(self) -> List[ProofUpdate]:
        packs = {name: self._load(name) for name in ("spells.db", "cantrips.db", "items.db")}
        updates: List[ProofUpdate] = []

        for name in self.spells:
            pack_name: Optional[str] = None
            doc = None
            for candidate in ("spells.db", "cantrips.db"):
                doc = find_record_by_name(packs[candidate].docs, name)
                if doc is not None:
                    pack_name = candidate
                    break
            if doc is None:
                print(f'WARN: Spell not found in spells/cantrips packs: "{name}"', file=sys.stderr)
                continue

            system = doc.get("system")
            if not isinstance(system, dict):
                system = {}
            prompt = build_proof_spell_prompt(name, system.get("school"), system.get("rank"))
            update = self._generate("spell", "spells", pack_name, name, prompt, doc)
            if update:
                packs[pack_name].dirty = True
                updates.append(update)

        for name in self.items:
            doc = find_record_by_name(packs["items.db"].docs, name)
            if doc is None:
                print(f'WARN: Item not found in items pack: "{name}"', file=sys.stderr)
                continue

            update = self._generate("item", "items", "items.db", name, build_proof_item_prompt(name), doc)
            if update:
                packs["items.db"].dirty = True
                updates.append(update)

        if not self.settings.dry_run:
            for pack in packs.values():
                if pack.dirty:
                    save_pack(pack.path, pack.docs, pack.fmt)

        print("\nUpdated docs:")
        for u in updates:
            print(f"  {u.kind:<5}  {u.pack:<11}  {u.name}  ->  {u.img}")
        return updates

    def _generate(
        self,
        kind: str,
        kind_dir: str,
        pack_name: str,
        name: str,
        prompt: str,
        doc: dict,
    ) -> Optional[ProofUpdate]:
        file_rel = PurePosixPath("icons", "generated", kind_dir, f"{slugify(name)}.png")
        print(f"Generating {kind} icon: {name} -> {file_rel}")
        if self.settings.dry_run:
            print(f" prompt: {prompt}")
            return None

        png = self.generator.generate(prompt, PROOF_ICON_SIZE)
        write_icon(self.settings.root / file_rel, png)
        doc["img"] = f"modules/{self.module_id}/{file_rel}"
        (self.sleep or time.sleep)(self.delay)
        return ProofUpdate(kind=kind, pack=pack_name, name=name, img=doc["img"])
