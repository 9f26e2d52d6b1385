"""
Tests for the balance configuration.
"""

import json

import pytest
from pydantic import ValidationError

from tower_combat.combat.damage import mitigate_defended
from tower_combat.core.config import DEFAULT_CONFIG, load_config


def test_defaults():
    """
    Test the shipped balance values.
    """
    assert DEFAULT_CONFIG.defense_cooldown == 3
    assert DEFAULT_CONFIG.defend_damage_factor == pytest.approx(0.15)
    assert DEFAULT_CONFIG.max_extra_turns == 3


def test_override_file(tmp_path):
    """
    Test that a JSON file overrides only the keys it names.
    """
    path = tmp_path / "balance.json"
    path.write_text(json.dumps({"defend_damage_factor": 0.5}), encoding="utf-8")
    config = load_config(path)
    assert mitigate_defended(100, config) == 50
    assert config.defense_cooldown == 3


def test_invalid_override_is_rejected(tmp_path):
    """
    Test that out of range values fail validation.
    """
    path = tmp_path / "balance.json"
    path.write_text(json.dumps({"defend_damage_factor": 2}), encoding="utf-8")
    with pytest.raises(ValidationError):
        load_config(path)
