"""
Equipment module for the combat engine.

Defines equipped items and the slot layout the equipment collaborator
reports. A weapon's mastery category is an explicit tag; when weapon data
omits it, the category is inferred from the name once, while the item is
being built, and never again at combat time.
"""

from typing import Any

from pydantic import BaseModel, Field, model_validator

from tower_combat.core.constants import (
    WEAPON_CATEGORY_KEYWORDS,
    EquipmentType,
    WeaponCategory,
)


def infer_weapon_category(name: str) -> WeaponCategory:
    """
    Infers the weapon category from keywords in its name.

    Args:
        name (str):
            The weapon name.

    Returns:
        WeaponCategory:
            The first matching category, SWORD when nothing matches.

    """
    lowered = name.lower()
    for category, keywords in WEAPON_CATEGORY_KEYWORDS.items():
        if any(keyword in lowered for keyword in keywords):
            return category
    return WeaponCategory.SWORD


class Equipment(BaseModel):
    """An item that can be equipped in a slot."""

    id: str = Field(
        description="Unique identifier of the item.",
    )
    name: str = Field(
        description="Display name of the item.",
    )
    equipment_type: EquipmentType = Field(
        description="Kind of item.",
    )
    category: WeaponCategory | None = Field(
        None,
        description="Mastery category, only meaningful for weapons.",
    )
    subtype: str | None = Field(
        None,
        description="Finer weapon family, such as 'staff' or 'dagger'.",
    )

    @model_validator(mode="before")
    @classmethod
    def _resolve_category(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        if data.get("equipment_type") in (EquipmentType.WEAPON, "WEAPON"):
            if data.get("category") is None:
                data = {**data, "category": infer_weapon_category(data["name"])}
        return data

    @property
    def is_weapon(self) -> bool:
        return self.equipment_type == EquipmentType.WEAPON

    @property
    def is_shield(self) -> bool:
        return self.equipment_type == EquipmentType.SHIELD


class EquipmentSlots(BaseModel):
    """What a character currently has equipped."""

    main_hand: Equipment | None = None
    off_hand: Equipment | None = None
    armor: Equipment | None = None
    accessories: list[Equipment] = Field(default_factory=list)

    @property
    def main_weapon(self) -> Equipment | None:
        """Returns the main-hand item if it is a weapon."""
        if self.main_hand is not None and self.main_hand.is_weapon:
            return self.main_hand
        return None

    @property
    def off_hand_weapon(self) -> Equipment | None:
        """Returns the off-hand item if it is a weapon."""
        if self.off_hand is not None and self.off_hand.is_weapon:
            return self.off_hand
        return None

    @property
    def is_dual_wielding(self) -> bool:
        """Returns True if both hands hold a weapon."""
        return self.main_weapon is not None and self.off_hand_weapon is not None

    @property
    def has_shield(self) -> bool:
        """Returns True if a shield is held in the off hand."""
        return self.off_hand is not None and self.off_hand.is_shield

    @property
    def has_off_hand_staff(self) -> bool:
        """Returns True if the off hand holds a staff."""
        weapon = self.off_hand_weapon
        return weapon is not None and weapon.subtype == "staff"
