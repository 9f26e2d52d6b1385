"""
Main entry point for the tower combat engine.

Runs an interactive climb in the console: the player fights its way up the
tower floor by floor, with every collaborator (character records, cemetery,
rewards, equipment, floors, inventory and events) kept in memory.

The demo supports:
- Loading spells, weapons and enemies from the bundled JSON content
- Overriding the balance constants from a JSON file
- Seeding the random source to replay a climb
"""

import argparse
import logging
import random
from pathlib import Path

from tower_combat.character.combatant import Player
from tower_combat.combat.combat_manager import CombatManager
from tower_combat.core.config import DEFAULT_CONFIG, load_config
from tower_combat.core.constants import BattleMode
from tower_combat.core.content import ContentRepository
from tower_combat.core.logging import setup_logging
from tower_combat.core.utils import cprint, crule
from tower_combat.items.equipment import EquipmentSlots
from tower_combat.services.in_memory import (
    InMemoryCharacterService,
    build_in_memory_services,
)
from tower_combat.ui.cli_interface import PlayerInterface


def build_player(content: ContentRepository) -> Player:
    """Creates the sample adventurer of the demo."""
    spells = [
        spell
        for spell_id in ("fireball", "heal", "poison_cloud", "battle_cry")
        if (spell := content.get_spell(spell_id)) is not None
    ]
    return Player(
        id="player-1",
        name="Bell",
        hp=120,
        max_hp=120,
        mana=60,
        max_mana=60,
        attack=22,
        defense=12,
        speed=14,
        strength=14,
        dexterity=15,
        intelligence=12,
        wisdom=11,
        critical_chance=10,
        critical_damage=150,
        double_attack_chance=5,
        spells=spells,
    )


def parse_arguments() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Climb the tower, one fight at a time.")
    parser.add_argument("--config", type=Path, help="JSON file overriding balance values.")
    parser.add_argument("--data", type=Path, help="Directory holding the content files.")
    parser.add_argument("--seed", type=int, help="Seed of the random source.")
    parser.add_argument("--verbose", action="store_true", help="Show debug logs.")
    return parser.parse_args()


def main() -> None:
    args = parse_arguments()
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    crule(":crossed_swords:  Tower Combat", style="bold green")
    cprint(
        "Climb the tower floor by floor. Fight, defend, cast spells or flee. "
        "Death is permanent.\n",
        style="bold blue",
    )

    config = load_config(args.config) if args.config else DEFAULT_CONFIG
    rng = random.Random(args.seed)
    content = ContentRepository(args.data, verbose=True)
    player = build_player(content)
    services = build_in_memory_services(
        content,
        rng,
        loadouts={
            player.id: EquipmentSlots(
                main_hand=content.get_weapon("iron_sword"),
                off_hand=content.get_weapon("wooden_shield"),
            )
        },
        stock={player.id: {"health_potion": 3, "mana_potion": 2}},
    )
    if isinstance(services.characters, InMemoryCharacterService):
        services.characters.seed_skills(player)

    first = services.floors.advance(player, None)
    cprint(first.message, style="bold green")
    manager = CombatManager(services, rng, config)
    manager.start_encounter(player, first.enemy, first.floor)

    ui = PlayerInterface()
    try:
        while True:
            state = manager.state
            ui.show_state(state)
            if state.mode == BattleMode.DEFEAT:
                crule(":skull:  You Died", style="bold red")
                break
            choice = ui.choose_action(state)
            if choice is None:
                break
            action, spell_id, consumable_id = choice
            result = manager.submit_player_action(action, spell_id, consumable_id)
            ui.show_narration(result.narration)
    except KeyboardInterrupt:
        cprint("")
    crule(":crossed_swords:  Climb Finished", style="bold green")


if __name__ == "__main__":
    main()
