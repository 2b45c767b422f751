"""Tests for the macro auto-import."""

from icongen.macros import DESIRED_MACROS, MODULE_ID, import_module_macros


class FakeWorld:
    def __init__(self, is_gm=True, world_macros=(), compendium=None):
        self.is_gm = is_gm
        self.world_macros = list(world_macros)
        self.compendium = compendium
        self.created = []
        self.fetched = []
        self.index_queries = 0

    def find_macro(self, name):
        return next((m for m in self.world_macros if m == name), None)

    def list_compendium_entries(self, pack_key):
        self.index_queries += 1
        if self.compendium is None or pack_key != f"{MODULE_ID}.macros":
            return None
        return [{"_id": doc["_id"], "name": doc["name"]} for doc in self.compendium]

    def get_compendium_document(self, pack_key, entry_id):
        self.fetched.append(entry_id)
        return next(doc for doc in self.compendium if doc["_id"] == entry_id)

    def create_macro(self, data):
        self.created.append(data)
        self.world_macros.append(data["name"])


def compendium():
    return [
        {"_id": "m1", "name": DESIRED_MACROS[0], "type": "script", "command": "run()"},
        {"_id": "m2", "name": DESIRED_MACROS[1], "type": "script", "command": "clean()"},
    ]


def test_imports_missing_macros():
    world = FakeWorld(compendium=compendium())

    assert import_module_macros(world) == DESIRED_MACROS

    assert world.created == [
        {"name": DESIRED_MACROS[0], "type": "script", "command": "run()"},
        {"name": DESIRED_MACROS[1], "type": "script", "command": "clean()"},
    ]


def test_existing_macros_are_left_alone():
    world = FakeWorld(world_macros=[DESIRED_MACROS[0]], compendium=compendium())

    assert import_module_macros(world) == [DESIRED_MACROS[1]]
    assert world.fetched == ["m2"]


def test_non_gm_does_nothing():
    world = FakeWorld(is_gm=False, compendium=compendium())
    assert import_module_macros(world) == []
    assert world.created == []


def test_missing_compendium_does_nothing():
    world = FakeWorld(compendium=None)
    assert import_module_macros(world) == []


def test_names_not_in_compendium_are_skipped():
    world = FakeWorld(compendium=compendium()[:1])
    assert import_module_macros(world) == [DESIRED_MACROS[0]]


def test_source_document_is_not_mutated():
    docs = compendium()
    world = FakeWorld(compendium=docs)
    import_module_macros(world)
    assert docs[0]["_id"] == "m1"


def test_compendium_not_queried_when_all_macros_exist():
    world = FakeWorld(world_macros=list(DESIRED_MACROS), compendium=compendium())

    assert import_module_macros(world) == []
    assert world.index_queries == 0


def test_compendium_index_queried_once():
    world = FakeWorld(compendium=compendium())
    import_module_macros(world)
    assert world.index_queries == 1
