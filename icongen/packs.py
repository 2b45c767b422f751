import json
import re
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Tuple

from .errors import ConfigurationError, FileSystemError, ParseError


PackFormat = Literal["array", "ndjson"]
Record = Dict[str, Any]

PACK_SUFFIX = ".db"

_LINE_SPLIT = re.compile(r"\r?\n")
_LONE_SURROGATE = re.compile("[\ud800-\udfff]")


def _dumps(value: Any) -> str:
    # Same shape as JSON.stringify: no whitespace, non-ASCII left as-is,
    # lone surrogates written back as \uXXXX escapes.
    text = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return _LONE_SURROGATE.sub(lambda m: "\\u%04x" % ord(m.group()), text)


def list_pack_files(packs_dir: Path) -> List[Path]:
    if not packs_dir.is_dir():
        raise ConfigurationError(f"packs/ not found at: {packs_dir}")
    return sorted(
        (p for p in packs_dir.iterdir() if p.is_file() and p.name.lower().endswith(PACK_SUFFIX)),
        key=lambda p: (p.name.lower(), p.name),
    )


def load_pack(path: Path) -> Tuple[List[Any], PackFormat]:
    """
    Read a pack data file and detect how it is serialized.

    A file whose trimmed content starts with "[" is one JSON array; anything
    else is treated as one JSON document per non-empty line.
    """
    try:
        raw = path.read_text(encoding="utf-8").strip()
    except UnicodeDecodeError as err:
        raise ParseError(path.name, f"invalid UTF-8 ({err.reason} at byte {err.start})") from err
    except OSError as err:
        raise FileSystemError(f"Could not read pack {path}: {err}") from err

    if not raw:
        return [], "ndjson"

    if raw.startswith("["):
        try:
            docs = json.loads(raw)
        except json.JSONDecodeError as err:
            raise ParseError(path.name, err.msg, line=err.lineno) from err
        if not isinstance(docs, list):
            raise ParseError(path.name, "expected a JSON array")
        return docs, "array"

    lines = [line.strip() for line in _LINE_SPLIT.split(raw)]
    docs = []
    # Line numbers count non-empty lines only.
    for idx, line in enumerate(filter(None, lines)):
        try:
            docs.append(json.loads(line))
        except json.JSONDecodeError as err:
            raise ParseError(path.name, err.msg, line=idx + 1) from err
    return docs, "ndjson"


def save_pack(path: Path, docs: List[Any], fmt: PackFormat) -> None:
    if fmt == "array":
        text = _dumps(docs) + "\n"
    else:
        text = "\n".join(_dumps(d) for d in docs) + "\n"
    # Encode first so a bad document cannot leave a truncated pack behind.
    try:
        data = text.encode("utf-8")
    except UnicodeEncodeError as err:
        raise FileSystemError(f"Could not encode pack {path}: {err}") from err
    try:
        path.write_bytes(data)
    except OSError as err:
        raise FileSystemError(f"Could not write pack {path}: {err}") from err


def find_record_by_name(docs: List[Any], name: str) -> Optional[Record]:
    for doc in docs:
        if isinstance(doc, dict) and doc.get("name") == name:
            return doc
    return None
