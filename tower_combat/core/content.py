"""
Content loading for the combat engine.

Reads the spells, weapons and enemy templates the engine is fed with from
JSON files and indexes them by id.
"""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from catchery import log_warning
from pydantic import BaseModel, ValidationError

from tower_combat.actions.spell import Spell
from tower_combat.character.combatant import Enemy
from tower_combat.items.equipment import Equipment

from .utils import cprint

# Directory holding the content bundled with the package.
DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "data"

M = TypeVar("M", bound=BaseModel)


class ContentRepository:
    """
    Registry of the game content the engine is fed with: spells, weapons and
    enemy templates, each indexed by id.

    The repository is an ordinary object handed to whoever needs it. Content
    is loaded lazily on first access and can be dropped with ``invalidate``
    or re-read with ``reload``.
    """

    spells: dict[str, Spell]
    weapons: dict[str, Equipment]
    enemies: dict[str, Enemy]

    def __init__(self, data_dir: Path | None = None, verbose: bool = False) -> None:
        """
        Initialize the ContentRepository.

        Args:
            data_dir (Path | None):
                The directory containing the data files. Defaults to the
                content bundled with the package.
            verbose (bool):
                Whether to print what is being loaded.

        """
        self.data_dir = data_dir or DEFAULT_DATA_DIR
        self.verbose = verbose
        self.loaded = False

    def reload(self, root: Path | None = None) -> None:
        """
        (Re)load every content file from disk.

        Args:
            root (Path | None):
                The directory to load from; keeps the current one if None.

        """
        if root is not None:
            self.data_dir = root
        self.spells = _load_json_file(
            self.data_dir / "spells.json",
            lambda data: _index_models(data, Spell, "spells"),
            "spells",
            self.verbose,
        )
        self.weapons = _load_json_file(
            self.data_dir / "weapons.json",
            lambda data: _index_models(data, Equipment, "weapons"),
            "weapons",
            self.verbose,
        )
        self.enemies = _load_json_file(
            self.data_dir / "enemies.json",
            lambda data: _index_models(data, Enemy, "enemies"),
            "enemies",
            self.verbose,
        )
        self.loaded = True

    def invalidate(self) -> None:
        """Drops the cached content; the next access loads it again."""
        for attribute in ("spells", "weapons", "enemies"):
            self.__dict__.pop(attribute, None)
        self.loaded = False

    def _ensure_loaded(self) -> None:
        if not self.loaded:
            self.reload()

    def get_spell(self, spell_id: str) -> Spell | None:
        """Get a fresh copy of a spell by id, or None if not found."""
        self._ensure_loaded()
        spell = self.spells.get(spell_id)
        return spell.model_copy(deep=True) if spell else None

    def get_weapon(self, weapon_id: str) -> Equipment | None:
        """Get a weapon by id, or None if not found."""
        self._ensure_loaded()
        return self.weapons.get(weapon_id)

    def spawn_enemy(self, enemy_id: str) -> Enemy | None:
        """Get a fresh enemy built from a template, or None if not found."""
        self._ensure_loaded()
        template = self.enemies.get(enemy_id)
        return template.model_copy(deep=True) if template else None

    def enemies_up_to_level(self, level: int) -> list[Enemy]:
        """Returns the enemy templates whose level does not exceed the given one."""
        self._ensure_loaded()
        return [enemy for enemy in self.enemies.values() if enemy.level <= level]


def _index_models(data: list[dict], model: type[M], description: str) -> dict[str, M]:
    """
    Builds models from raw entries, indexed by their id.

    Malformed entries are logged and skipped.

    Raises:
        ValueError: If two entries share the same id.

    """
    entries: dict[str, M] = {}
    for index, entry_data in enumerate(data):
        try:
            entry = model.model_validate(entry_data)
        except ValidationError as e:
            log_warning(
                f"Skipping malformed entry in {description}",
                {
                    "index": index,
                    "entry_id": entry_data.get("id") if isinstance(entry_data, dict) else None,
                    "errors": e.error_count(),
                },
            )
            continue
        entry_id = getattr(entry, "id")
        if entry_id in entries:
            raise ValueError(f"Duplicate id in {description}: {entry_id}")
        entries[entry_id] = entry
    return entries


def _load_json_file(
    filepath: Path,
    loader_func: Callable[[list[dict]], dict[str, Any]],
    description: str,
    verbose: bool = False,
) -> dict[str, Any]:
    """Helper to load and validate JSON files"""
    try:
        if verbose:
            cprint(f"  Loading {description}...", style="bold green")
        # Validate file path
        if not filepath.exists():
            raise FileNotFoundError(f"File not found: {filepath}")
        if not filepath.is_file():
            raise ValueError(f"Not a file: {filepath}")
        # Load and validate JSON
        with open(filepath, encoding="utf-8") as f:
            data = json.load(f)
        if not data:
            raise ValueError(f"Empty data list in {filepath}")
        if not isinstance(data, list):
            raise ValueError(f"Expected list in {filepath}, got {type(data).__name__}")
        return loader_func(data)
    except (json.JSONDecodeError, FileNotFoundError, ValueError) as e:
        raise ValueError(f"File {filepath} raised an error: {e}") from e
