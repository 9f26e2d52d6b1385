"""
Constants and enumerations for the combat engine.

Defines the enumerations for combatant types, skills, weapon categories,
enemy behaviors, spell effects, battle modes, turn phases and narration
kinds used throughout the engine.
"""

from enum import Enum


class NiceEnum(Enum):
    """An enumeration that provides a nicer string representation."""

    def __str__(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        return self.name.replace("_", " ").lower().capitalize()


class CharacterType(NiceEnum):
    """Defines the type of combatant in a battle."""

    PLAYER = "PLAYER"
    ENEMY = "ENEMY"

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this character type."""
        return {
            CharacterType.PLAYER: "👤",
            CharacterType.ENEMY: "👹",
        }.get(self, "❔")

    @property
    def color(self) -> str:
        """Returns the color string associated with this character type."""
        return {
            CharacterType.PLAYER: "bold blue",
            CharacterType.ENEMY: "bold red",
        }.get(self, "dim white")

    def colorize(self, message: str) -> str:
        """Applies character type color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class SkillType(NiceEnum):
    """Mastery skills a player can raise through combat."""

    SWORD_MASTERY = "sword_mastery"
    AXE_MASTERY = "axe_mastery"
    BLUNT_MASTERY = "blunt_mastery"
    MAGIC_MASTERY = "magic_mastery"
    DEFENSE_MASTERY = "defense_mastery"

    @property
    def display_name(self) -> str:
        return {
            SkillType.SWORD_MASTERY: "Sword Mastery",
            SkillType.AXE_MASTERY: "Axe Mastery",
            SkillType.BLUNT_MASTERY: "Blunt Weapon Mastery",
            SkillType.MAGIC_MASTERY: "Magic Mastery",
            SkillType.DEFENSE_MASTERY: "Defense Mastery",
        }[self]


class WeaponCategory(NiceEnum):
    """Weapon families, each trained by its own mastery skill."""

    SWORD = "SWORD"
    AXE = "AXE"
    BLUNT = "BLUNT"
    MAGIC = "MAGIC"

    @property
    def skill(self) -> SkillType:
        """Returns the mastery skill trained by this weapon category."""
        return {
            WeaponCategory.SWORD: SkillType.SWORD_MASTERY,
            WeaponCategory.AXE: SkillType.AXE_MASTERY,
            WeaponCategory.BLUNT: SkillType.BLUNT_MASTERY,
            WeaponCategory.MAGIC: SkillType.MAGIC_MASTERY,
        }[self]


# Keyword table used when weapon data does not declare its category.
WEAPON_CATEGORY_KEYWORDS: dict[WeaponCategory, tuple[str, ...]] = {
    WeaponCategory.SWORD: (
        "espada",
        "sword",
        "rapier",
        "lâmina",
        "blade",
        "adaga",
        "dagger",
        "punhal",
        "fang",
    ),
    WeaponCategory.AXE: ("machado", "axe", "machadinha", "hatchet"),
    WeaponCategory.BLUNT: (
        "martelo",
        "mace",
        "clava",
        "maça",
        "porrete",
        "hammer",
        "club",
    ),
    WeaponCategory.MAGIC: (
        "cajado",
        "staff",
        "varinha",
        "wand",
        "orbe",
        "orb",
        "bastão",
        "cetro",
        "scepter",
    ),
}


class EquipmentType(NiceEnum):
    """Kinds of equipment that can occupy a slot."""

    WEAPON = "WEAPON"
    SHIELD = "SHIELD"
    ARMOR = "ARMOR"
    ACCESSORY = "ACCESSORY"


class EnemyBehavior(NiceEnum):
    """Behavior archetype driving an enemy's action choices."""

    AGGRESSIVE = "aggressive"
    DEFENSIVE = "defensive"
    BALANCED = "balanced"


class AbilityKind(NiceEnum):
    """Explicit kind of an enemy special ability."""

    HEAL = "HEAL"
    DAMAGE = "DAMAGE"
    CRITICAL = "CRITICAL"
    AREA = "AREA"
    GENERIC = "GENERIC"


class SpellEffectType(NiceEnum):
    """What a spell does when it resolves."""

    DAMAGE = "damage"
    HEAL = "heal"
    BUFF = "buff"
    DEBUFF = "debuff"
    DOT = "dot"
    HOT = "hot"

    @property
    def targets_enemy(self) -> bool:
        """Returns True if the spell is aimed at the opponent."""
        return self in (
            SpellEffectType.DAMAGE,
            SpellEffectType.DEBUFF,
            SpellEffectType.DOT,
        )

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this spell effect."""
        return {
            SpellEffectType.DAMAGE: "⚔️",
            SpellEffectType.HEAL: "❤️",
            SpellEffectType.BUFF: "🛡️",
            SpellEffectType.DEBUFF: "💀",
            SpellEffectType.DOT: "🔥",
            SpellEffectType.HOT: "✨",
        }.get(self, "🔮")


class Attribute(NiceEnum):
    """Attributes that timed modifications can alter."""

    ATTACK = "attack"
    DEFENSE = "defense"
    SPEED = "speed"
    STRENGTH = "strength"
    DEXTERITY = "dexterity"
    INTELLIGENCE = "intelligence"
    WISDOM = "wisdom"
    CRITICAL_CHANCE = "critical_chance"
    CRITICAL_DAMAGE = "critical_damage"
    DOUBLE_ATTACK_CHANCE = "double_attack_chance"


class ValueKind(NiceEnum):
    """How an attribute modification value is interpreted."""

    FLAT = "flat"
    PERCENTAGE = "percentage"


class ActionType(NiceEnum):
    """Actions a player can submit."""

    ATTACK = "attack"
    DEFEND = "defend"
    SPELL = "spell"
    CONSUMABLE = "consumable"
    FLEE = "flee"
    SPECIAL = "special"
    CONTINUE = "continue"
    INTERACT_EVENT = "interact_event"


class EnemyActionType(NiceEnum):
    """Actions an enemy can take on its turn."""

    ATTACK = "attack"
    SPELL = "spell"
    SPECIAL = "special"


class BattleMode(NiceEnum):
    """Overall mode of an encounter."""

    ONGOING = "ongoing"
    VICTORY = "victory"
    DEFEAT = "defeat"
    FLED = "fled"
    SPECIAL_EVENT = "special_event"
    CLEARED = "cleared"

    @property
    def is_terminal(self) -> bool:
        """Returns True if no fight is running in this mode."""
        return self is not BattleMode.ONGOING


class TurnPhase(NiceEnum):
    """Phase of the turn state machine."""

    AWAITING_PLAYER_ACTION = "AWAITING_PLAYER_ACTION"
    RESOLVING_PLAYER_ACTION = "RESOLVING_PLAYER_ACTION"
    AWAITING_ENEMY_ACTION = "AWAITING_ENEMY_ACTION"
    RESOLVING_ENEMY_ACTION = "RESOLVING_ENEMY_ACTION"
    TURN_COMPLETE = "TURN_COMPLETE"


class FloorType(NiceEnum):
    """Kind of tower floor, which scales rewards."""

    COMMON = "common"
    ELITE = "elite"
    BOSS = "boss"


class NarrationKind(NiceEnum):
    """Category of a narration line."""

    SYSTEM = "system"
    PLAYER_ACTION = "player_action"
    ENEMY_ACTION = "enemy_action"
    DAMAGE = "damage"
    HEALING = "healing"
    EFFECT = "effect"
    SKILL_XP = "skill_xp"
    LEVEL_UP = "level_up"
    REWARD = "reward"
    WARNING = "warning"

    @property
    def color(self) -> str:
        """Returns the color string associated with this narration kind."""
        return {
            NarrationKind.SYSTEM: "dim white",
            NarrationKind.PLAYER_ACTION: "bold blue",
            NarrationKind.ENEMY_ACTION: "bold red",
            NarrationKind.DAMAGE: "red",
            NarrationKind.HEALING: "bold green",
            NarrationKind.EFFECT: "bold magenta",
            NarrationKind.SKILL_XP: "cyan",
            NarrationKind.LEVEL_UP: "bold yellow",
            NarrationKind.REWARD: "bold yellow",
            NarrationKind.WARNING: "yellow",
        }.get(self, "white")

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this narration kind."""
        return {
            NarrationKind.PLAYER_ACTION: "🗡️",
            NarrationKind.ENEMY_ACTION: "👹",
            NarrationKind.DAMAGE: "💥",
            NarrationKind.HEALING: "💚",
            NarrationKind.EFFECT: "✨",
            NarrationKind.SKILL_XP: "📈",
            NarrationKind.LEVEL_UP: "🎉",
            NarrationKind.REWARD: "💰",
            NarrationKind.WARNING: "⚠️",
        }.get(self, "•")

    def colorize(self, message: str) -> str:
        """Applies narration color formatting to a message."""
        return f"[{self.color}]{message}[/]"
