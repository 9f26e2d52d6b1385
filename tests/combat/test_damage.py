"""
Tests for physical damage resolution.
"""

from tower_combat.combat.damage import (
    apply_resistance,
    effective_double_attack_chance,
    mitigate_defended,
    resolve_attack,
)


def strike(rng, attack=50, defense=20, crit=0, crit_damage=110, dac=0):
    return resolve_attack(attack, defense, crit, crit_damage, dac, 10, 10, rng)


def test_damage_subtracts_half_defense(scripted):
    """
    Test that 50 attack against 20 defense deals 40 damage with no procs.
    """
    result = strike(scripted())
    assert result.damage == 40
    assert not result.is_critical
    assert not result.is_double_attack
    assert result.total_attacks == 1


def test_fractional_defense_is_floored(scripted):
    """
    Test that half of an odd defense value is floored away from the damage.
    """
    assert strike(scripted(), attack=50, defense=15).damage == 42


def test_damage_never_below_one(scripted):
    """
    Test that overwhelming defense still lets one point of damage through.
    """
    assert strike(scripted(), attack=10, defense=100).damage == 1


def test_no_attack_power_deals_minimum_damage(scripted):
    """
    Test that zero attack short-circuits to the minimum damage without rolls.
    """
    rng = scripted([0.0, 0.0])
    result = strike(rng, attack=0, crit=100, dac=35)
    assert result.damage == 1
    assert not result.is_critical
    assert rng.values == [0.0, 0.0]


def test_critical_hit_scales_damage(scripted):
    """
    Test that a critical hit multiplies the base damage by critical damage.
    """
    result = strike(scripted([0.10, 0.99]), crit=50, crit_damage=150)
    assert result.is_critical
    assert result.damage == 60


def test_double_attack_doubles_damage(scripted):
    """
    Test that a successful double attack doubles the damage dealt.
    """
    result = strike(scripted([0.99, 0.05]), dac=20)
    assert result.is_double_attack
    assert result.damage == 80
    assert result.total_attacks == 2
    assert result.hit_damage == 40


def test_critical_and_double_attack_stack(scripted):
    """
    Test that a critical double attack doubles the critical hit.
    """
    result = strike(scripted([0.0, 0.0]), crit=100, crit_damage=150, dac=35)
    assert result.is_critical and result.is_double_attack
    assert result.damage == 120


def test_double_attack_chance_is_capped():
    """
    Test that dexterity and speed bonuses cannot push the chance above 35%.
    """
    assert effective_double_attack_chance(30, 30, 30) == 35


def test_double_attack_chance_low_dexterity_penalty():
    """
    Test that dexterity below 10 reduces the double attack chance.
    """
    assert effective_double_attack_chance(10, 4, 10) == 7


def test_defending_lets_fifteen_percent_through():
    """
    Test that a defended hit of 100 raw damage deals 15.
    """
    assert mitigate_defended(100) == 15
    assert mitigate_defended(5) == 0


def test_resistance_scales_damage_with_minimum():
    """
    Test that resistances reduce damage but never below one point.
    """
    assert apply_resistance(40, 0.5) == 20
    assert apply_resistance(40, 1.5) == 60
    assert apply_resistance(1, 0.1) == 1
