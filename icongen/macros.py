from typing import Any, Dict, List, Optional, Protocol, Sequence


MODULE_ID = "dragonbane-arcane-expansion"

DESIRED_MACROS = [
    "DBAE – Import to Expanded Dragonbane Folders",
    "DBAE – Cleanup Imported DBAE Content",
]


class PlatformContext(Protocol):
    """
    The slice of the tabletop platform the macro import needs.

    Implementations wrap the live world (macro directory and compendium packs);
    tests pass a plain in-memory object.
    """

    is_gm: bool

    def find_macro(self, name: str) -> Optional[Any]: ...

    def list_compendium_entries(self, pack_key: str) -> Optional[List[Dict[str, Any]]]: ...

    def get_compendium_document(self, pack_key: str, entry_id: str) -> Dict[str, Any]: ...

    def create_macro(self, data: Dict[str, Any]) -> Any: ...


def import_module_macros(
    ctx: PlatformContext,
    module_id: str = MODULE_ID,
    names: Sequence[str] = DESIRED_MACROS,
) -> List[str]:
    """
    Copy the module's convenience macros into the world the first time a GM
    loads it. Macros already present in the world are left alone.

    Returns the names that were imported.
    """
    if not ctx.is_gm:
        return []

    pack_key = f"{module_id}.macros"
    index = None
    imported = []
    for name in names:
        if ctx.find_macro(name) is not None:
            continue

        # Only look at the compendium once a macro is actually missing.
        if index is None:
            index = ctx.list_compendium_entries(pack_key)
            if index is None:
                return imported

        entry = next((e for e in index if e.get("name") == name), None)
        if entry is None:
            continue

        data = dict(ctx.get_compendium_document(pack_key, entry["_id"]))
        data.pop("_id", None)
        ctx.create_macro(data)
        print(f"DBAE | Imported macro into world: {name}")
        imported.append(name)
    return imported
