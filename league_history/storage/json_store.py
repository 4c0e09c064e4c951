import json
from pathlib import Path
from typing import Any, Dict, List, Union

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from league_history.models.overrides import LeagueOverrides
from league_history.models.owner import Owner
from league_history.models.season import Season

PathLike = Union[str, Path]

_seasons_adapter = TypeAdapter(List[Season])
_owners_adapter = TypeAdapter(List[Owner])


class StorageError(Exception):
    """Raised when a league document cannot be read, parsed or written."""

    pass


def _read_json(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        raise StorageError(f"File not found: {path}")
    except json.JSONDecodeError as e:
        raise StorageError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise StorageError(f"Failed to read {path}: {e}") from e


def _write_json(path: Path, data: Any) -> None:
    # Sorted keys and a fixed indent keep reruns byte-identical
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True, ensure_ascii=False)
            f.write("\n")
    except OSError as e:
        raise StorageError(f"Failed to write {path}: {e}") from e


def load_seasons(path: PathLike) -> List[Season]:
    path = Path(path)
    try:
        seasons = _seasons_adapter.validate_python(_read_json(path))
    except ValidationError as e:
        raise StorageError(f"{path} is not a valid season list: {e}") from e
    logger.info(f"Loaded {len(seasons)} seasons from {path}")
    return seasons


def save_seasons(seasons: List[Season], path: PathLike) -> None:
    path = Path(path)
    _write_json(path, _seasons_adapter.dump_python(seasons, mode="json", by_alias=True))
    logger.success(f"Saved {len(seasons)} seasons to {path}")


def load_owners(path: PathLike) -> List[Owner]:
    path = Path(path)
    try:
        owners = _owners_adapter.validate_python(_read_json(path))
    except ValidationError as e:
        raise StorageError(f"{path} is not a valid owner list: {e}") from e
    logger.info(f"Loaded {len(owners)} owners from {path}")
    return owners


def save_owners(owners: List[Owner], path: PathLike) -> None:
    path = Path(path)
    _write_json(path, _owners_adapter.dump_python(owners, mode="json", by_alias=True))
    logger.success(f"Saved {len(owners)} owners to {path}")


def load_overrides(path: PathLike) -> LeagueOverrides:
    """Loads the override document; a missing file means no overrides."""
    path = Path(path)
    if not path.exists():
        logger.warning(f"No override document at {path}; using none")
        return LeagueOverrides()
    try:
        return LeagueOverrides.model_validate(_read_json(path))
    except ValidationError as e:
        raise StorageError(f"{path} is not a valid override document: {e}") from e


def load_csv_text(path: PathLike) -> str:
    path = Path(path)
    try:
        return path.read_text(encoding="utf-8-sig")
    except FileNotFoundError:
        raise StorageError(f"File not found: {path}")
    except OSError as e:
        raise StorageError(f"Failed to read {path}: {e}") from e


def load_league_payloads(directory: PathLike) -> Dict[int, Dict[str, Any]]:
    """Reads ``<year>.json`` platform payloads from a directory, keyed by year.

    Files whose stem is not a year are skipped with a warning.
    """
    directory = Path(directory)
    if not directory.is_dir():
        logger.warning(f"League payload directory {directory} does not exist")
        return {}

    payloads: Dict[int, Dict[str, Any]] = {}
    for path in sorted(directory.glob("*.json")):
        if not path.stem.isdigit():
            logger.warning(f"Skipping {path.name}: file name is not a year")
            continue
        payload = _read_json(path)
        if not isinstance(payload, dict):
            raise StorageError(f"{path} does not hold a league payload object")
        payloads[int(path.stem)] = payload
    logger.info(f"Loaded {len(payloads)} league payload(s) from {directory}")
    return payloads
