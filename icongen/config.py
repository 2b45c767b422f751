import json
import math
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .errors import ConfigurationError


DEFAULT_SD_API = "http://192.168.1.174:7860"
DEFAULT_MODULE_ID = "module"


@dataclass
class Settings:
    root: Path
    sd_api: str = DEFAULT_SD_API
    limit: float = math.inf
    overwrite: bool = False
    dry_run: bool = False
    openai_api_key: Optional[str] = None

    @property
    def packs_dir(self) -> Path:
        return self.root / "packs"

    @property
    def icons_dir(self) -> Path:
        return self.root / "icons" / "generated"

    @property
    def manifest_path(self) -> Path:
        return self.root / "module.json"

    @classmethod
    def from_env(cls, root: Path, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Read the environment-style options:

        - SD_API: base URL of the self-hosted image endpoint
        - LIMIT: maximum records processed per pack (unset = unlimited)
        - OVERWRITE / DRYRUN: "1" enables, anything else disables
        - OPENAI_API_KEY: only needed by the proof icon tool
        """
        env = os.environ if environ is None else environ
        return cls(
            root=Path(root),
            sd_api=(env.get("SD_API") or DEFAULT_SD_API).rstrip("/"),
            limit=parse_limit(env.get("LIMIT")),
            overwrite=env.get("OVERWRITE", "0") == "1",
            dry_run=env.get("DRYRUN", "0") == "1",
            openai_api_key=env.get("OPENAI_API_KEY") or None,
        )

    def describe_limit(self) -> str:
        return "unlimited" if math.isinf(self.limit) else str(int(self.limit))


def parse_limit(value: Optional[str]) -> float:
    if value is None or not str(value).strip():
        return math.inf
    try:
        limit = int(str(value).strip())
    except ValueError:
        raise ConfigurationError(f"LIMIT must be a whole number, got {value!r}") from None
    if limit < 0:
        raise ConfigurationError(f"LIMIT must not be negative, got {limit}")
    return limit


def _read_manifest(path: Path) -> dict:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as err:
        raise ConfigurationError(f"{path.name} is not valid JSON: {err}") from err
    except UnicodeDecodeError as err:
        raise ConfigurationError(f"{path.name} is not valid UTF-8: {err}") from err
    except OSError as err:
        raise ConfigurationError(f"Could not read {path}: {err}") from err
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path.name} must contain a JSON object")
    return data


def get_module_id(settings: Settings, required: bool = False) -> str:
    """
    Resolve the module identifier from module.json (`id`, then `name`).

    When `required` is False a missing manifest only produces a warning and the
    generic id "module" is used, so pack icons can still be generated.
    """
    path = settings.manifest_path
    if not path.exists():
        if required:
            raise ConfigurationError("module.json not found in project root.")
        print(
            f"WARNING: module.json not found; defaulting moduleId='{DEFAULT_MODULE_ID}'",
            file=sys.stderr,
        )
        return DEFAULT_MODULE_ID

    manifest = _read_manifest(path)
    if required:
        module_id = manifest.get("id")
        if not module_id:
            raise ConfigurationError("module.json missing id")
        return str(module_id)
    return str(manifest.get("id") or manifest.get("name") or DEFAULT_MODULE_ID)
