"""
User interface module for the combat engine.

Provides the console front end of the demo climb: rich tables showing the
battle, and prompt_toolkit menus reading the player's choices.
"""

from typing import Any

from prompt_toolkit import ANSI, PromptSession
from rich.table import Table

from tower_combat.actions.spell import Spell
from tower_combat.character.combatant import Combatant, Player
from tower_combat.combat.battle_state import BattleState
from tower_combat.core.constants import ActionType, BattleMode
from tower_combat.core.narration import NarrationEvent
from tower_combat.core.utils import ccapture, cprint, make_bar

# one session keeps history
session: PromptSession = PromptSession(erase_when_done=True)

# Menu entries per battle mode.
MODE_ACTIONS: dict[BattleMode, list[ActionType]] = {
    BattleMode.ONGOING: [
        ActionType.ATTACK,
        ActionType.DEFEND,
        ActionType.SPELL,
        ActionType.CONSUMABLE,
        ActionType.FLEE,
    ],
    BattleMode.VICTORY: [ActionType.CONTINUE],
    BattleMode.FLED: [ActionType.CONTINUE],
    BattleMode.CLEARED: [ActionType.CONTINUE],
    BattleMode.SPECIAL_EVENT: [ActionType.INTERACT_EVENT],
    BattleMode.DEFEAT: [],
}


class PlayerInterface:
    """
    Command-line interface for the player during a climb.

    Uses prompt_toolkit for interactive input with numeric shortcuts and
    'q' to leave a menu.
    """

    def __init__(self, consumables: list[str] | None = None) -> None:
        """
        Initialize the PlayerInterface.

        Args:
            consumables (list[str] | None):
                Identifiers of the consumables offered in the item menu.

        """
        self.consumables = consumables or ["health_potion", "mana_potion"]

    def show_state(self, state: BattleState) -> None:
        """Prints the combatants of the encounter."""
        table = Table(title=self._title(state), pad_edge=False)
        table.add_column("Name", style="bold")
        table.add_column("HP")
        table.add_column("Mana")
        table.add_column("Effects", style="magenta")
        table.add_row(*self._combatant_row(state.player))
        if state.enemy is not None:
            table.add_row(*self._combatant_row(state.enemy))
        cprint(table)

    def show_narration(self, events: list[NarrationEvent]) -> None:
        """Prints narration lines with their colors."""
        for event in events:
            cprint(f"    {event.colored_text}")

    def choose_action(
        self, state: BattleState
    ) -> tuple[ActionType, str | None, str | None] | None:
        """
        Asks the player what to do.

        Args:
            state (BattleState):
                The current state, which decides the available actions.

        Returns:
            tuple[ActionType, str | None, str | None] | None:
                The action with its spell and consumable ids, or None if the
                player quits.

        """
        actions = MODE_ACTIONS.get(state.mode, [])
        if not actions:
            return None
        while True:
            action = self._choose("Actions", [a.display_name for a in actions], actions)
            if action is None:
                return None
            if action == ActionType.SPELL:
                spell = self.choose_spell(state.player)
                if spell is None:
                    continue
                return action, spell.id, None
            if action == ActionType.CONSUMABLE:
                consumable = self._choose(
                    "Items",
                    [c.replace("_", " ").title() for c in self.consumables],
                    self.consumables,
                )
                if consumable is None:
                    continue
                return action, None, consumable
            return action, None, None

    def choose_spell(self, player: Player) -> Spell | None:
        """Lets the player pick one of the spells it knows."""
        if not player.spells:
            cprint("    [yellow]You know no spells.[/]")
            return None
        labels = []
        for spell in player.spells:
            label = (
                f"{spell.effect_type.emoji} {spell.name} "
                f"({spell.mana_cost} MP"
                + (f", {spell.current_cooldown} cd" if spell.current_cooldown else "")
                + ")"
            )
            # Unavailable spells stay selectable so the engine explains why.
            labels.append(label if spell.can_cast(player.mana) else f"[dim]{label}[/]")
        return self._choose("Spells", labels, player.spells)

    def _choose(self, title: str, labels: list[str], options: list[Any]) -> Any:
        table = Table(title=title, pad_edge=False)
        table.add_column("#", style="cyan")
        table.add_column("Name", style="bold")
        for i, label in enumerate(labels, 1):
            table.add_row(str(i), label)
        table.add_row()
        table.add_row("q", "Back")
        prompt = "\n" + ccapture(table) + "\n> "
        while True:
            answer = session.prompt(ANSI(prompt))
            if not answer:
                continue
            index = self.get_digit_choice(answer) - 1
            if 0 <= index < len(options):
                return options[index]
            if answer.lower() == "q":
                return None

    @staticmethod
    def _title(state: BattleState) -> str:
        floor = f"Floor {state.floor.number}" if state.floor else "The Tower"
        return f"{floor} - {state.mode.display_name}"

    @staticmethod
    def _combatant_row(combatant: Combatant) -> tuple[str, str, str, str]:
        hp = f"{make_bar(combatant.hp, combatant.max_hp, color='red')} " + (
            f"{combatant.hp}/{combatant.max_hp}"
        )
        if isinstance(combatant, Player):
            mana = f"{make_bar(combatant.mana, combatant.max_mana, color='blue')} " + (
                f"{combatant.mana}/{combatant.max_mana}"
            )
        else:
            mana = str(getattr(combatant, "mana", ""))
        effects = combatant.active_effects
        names = [
            *(dot.source_spell for dot in effects.dots),
            *(hot.source_spell for hot in effects.hots),
            *(buff.source_spell for buff in effects.buffs),
            *(debuff.source_spell for debuff in effects.debuffs),
            *(mod.describe() for mod in effects.attribute_modifications),
        ]
        return combatant.colored_name, hp, mana, ", ".join(names)

    @staticmethod
    def get_digit_choice(answer: str) -> int:
        """
        Convert a single digit string input to its integer value.

        Args:
            answer (str): User input string to parse.

        Returns:
            int: The integer value of the digit (0-9), or -1 if invalid input.

        """
        if isinstance(answer, str) and len(answer) == 1 and answer.isdigit():
            return int(answer)
        return -1
