"""Load per-job variant override files.

Each file is named after the job (``<job_name>.yaml``, ``.yml`` or ``.json``)
and holds a flat mapping of variant name to value, e.g.::

    Architecture: amd64
    Topology: single
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

VARIANT_FILE_SUFFIXES = (".yaml", ".yml", ".json")


class VariantFileError(Exception):
    pass


def _load_raw(path: Path) -> Any:
    if path.suffix.lower() == ".json":
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise VariantFileError(f"{path}: invalid JSON: {e}") from e
    # base loader keeps every scalar as text, so a Release of 4.10 stays "4.10"
    yaml = YAML(typ="base")
    try:
        with path.open("r", encoding="utf-8") as f:
            return yaml.load(f)
    except YAMLError as e:
        raise VariantFileError(f"{path}: invalid YAML: {e}") from e


def load_variant_file(path: Path) -> Dict[str, str]:
    """Read one override file. Empty files yield an empty mapping."""
    data = _load_raw(Path(path))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise VariantFileError(f"{path}: expected a mapping of variant name to value, got {type(data).__name__}")
    out: Dict[str, str] = {}
    for k, v in data.items():
        if isinstance(v, (dict, list)):
            raise VariantFileError(f"{path}: variant {k!r} must be a scalar")
        out[str(k)] = "" if v is None else str(v)
    return out


def load_variant_files(directory: Path) -> Dict[str, Dict[str, str]]:
    """Read every override file in a directory, keyed by job name."""
    directory = Path(directory)
    if not directory.is_dir():
        raise VariantFileError(f"variants directory not found: {directory}")
    out: Dict[str, Dict[str, str]] = {}
    for path in sorted(directory.iterdir()):
        if not path.is_file() or path.suffix.lower() not in VARIANT_FILE_SUFFIXES:
            continue
        if path.stem in out:
            raise VariantFileError(f"duplicate variant files for job {path.stem}")
        out[path.stem] = load_variant_file(path)
    return out
