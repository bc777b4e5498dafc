"""
Tick engine tests: growth, technology, cities, expansion, nuclear strikes,
wars and secession. Event probabilities are pinned to 0 or 1 so each policy
can be exercised in isolation.
"""

import pytest
import random

from config import COUNTRY_COLORS, SimulationConfig
from chronology import SimDate
from combat import ATTACKER_VICTORY, DEFENDER_VICTORY, NUCLEAR_RESULT, WarSystem
from events import EventKind, EventLog
from geography import Territory, TerritoryGrid
from nation import Disposition
from politics import INDEPENDENCE_RESULT
from technology import Era, WEAPON_EVOLUTION, Weapon
from world import EXPANSION_RESULT, NEUTRAL_TERRITORY, InvariantViolation, World, tick


def quiet_config(**overrides):
    """5x5 all-land map of 20x20 cells with every random event switched off."""
    params = dict(
        rows=5, cols=5, map_width=100.0, map_height=100.0, land_probability=1.0,
        expansion_probability=0.0, nuclear_probability=0.0,
        war_probability=0.0, secession_probability=0.0,
    )
    params.update(overrides)
    return SimulationConfig(**params)


@pytest.fixture
def rng():
    return random.Random(42)


def make_world(rng, **overrides):
    return World(quiet_config(**overrides), rng=rng)


def found(world, territory_ids, **overrides):
    """Create a country owning territory_ids and record ownership in the grid."""
    territories = [world.grid.get(tid) for tid in territory_ids]
    attributes = dict(
        name=f"Country {len(world.countries) + 1}",
        color="#3498DB",
        population=100000,
        economy=20000,
        military=5000,
        territories=territories,
        capital=territories[0].centroid,
        cities=[territories[0].centroid],
        weapons=[Weapon("Spear", Era.ANCIENT, 500), Weapon("Sword", Era.ANCIENT, 200)],
        disposition=Disposition.NEUTRAL,
    )
    attributes.update(overrides)
    country = world.countries.create(**attributes)
    for territory in territories:
        world.grid.transfer_ownership(territory.id, country.id)
    return country


class TestGrowth:
    """Deterministic per-tick resource growth."""

    def test_growth_at_ten_days(self, rng):
        world = make_world(rng)
        country = found(world, ["territory-2-2"])
        tick(world, 10, rng)
        assert country.population == 101000
        assert country.economy == 20400
        assert country.military == 5050

    def test_growth_uses_pre_tick_values(self, rng):
        world = make_world(rng)
        country = found(world, ["territory-2-2"], population=1000, economy=1000, military=1000)
        tick(world, 365, rng)
        assert country.population == 1000 + 365
        assert country.economy == 1000 + 730
        assert country.military == 1000 + 365

    def test_small_values_floor_to_zero(self, rng):
        world = make_world(rng)
        country = found(world, ["territory-2-2"], population=999, economy=499, military=999)
        tick(world, 1, rng)
        assert country.resources() == (999, 499, 999)

    def test_calendar_advances_by_multiplier(self, rng):
        world = make_world(rng)
        found(world, ["territory-2-2"])
        tick(world, 10, rng)
        tick(world, 365, rng)
        assert world.date == SimDate(1, 1, 16)
        assert world.tick_count == 2

    def test_negative_multiplier_rejected(self, rng):
        world = make_world(rng)
        with pytest.raises(ValueError):
            tick(world, -1, rng)

    def test_huge_values_do_not_overflow(self, rng):
        world = make_world(rng)
        country = found(world, ["territory-2-2"], population=10**400, economy=10**400, military=10**400)
        tick(world, 36500, rng)
        assert country.population == 10**400 + 365 * 10**399
        assert country.era_level == 1, "Astronomical economies always clear the era threshold"


class TestTechnology:
    """Era advancement and weapon re-rolls."""

    def test_weapons_rerolled_every_tick(self, rng):
        world = make_world(rng)
        country = found(world, ["territory-2-2"])
        for _ in range(3):
            tick(world, 1, rng)
            assert country.era_level == 0
            assert [w.name for w in country.weapons] == list(WEAPON_EVOLUTION[Era.ANCIENT])
            assert all(100 <= w.count <= 1099 for w in country.weapons)

    def test_no_advance_when_paused(self, rng):
        world = make_world(rng)
        country = found(world, ["territory-2-2"], economy=10**9)
        for _ in range(10):
            tick(world, 0, rng)
        assert country.era_level == 0

    def test_one_era_per_tick_up_to_nuclear(self, rng):
        world = make_world(rng, era_advance_threshold=-1.0)
        country = found(world, ["territory-2-2"])
        levels = []
        for _ in range(7):
            tick(world, 1, rng)
            levels.append(country.era_level)
        assert levels == [1, 2, 3, 4, 4, 4, 4]
        assert [w.name for w in country.weapons] == list(WEAPON_EVOLUTION[Era.NUCLEAR])


class TestCities:
    def test_city_spawned_when_population_exceeds_capacity(self, rng):
        world = make_world(rng)
        country = found(world, ["territory-2-2"], population=1200000,
                        cities=[(50.0, 50.0), (10.0, 10.0)])
        tick(world, 0, rng)
        assert len(country.cities) == 3, "Exactly one city per tick"
        x, y = country.cities[-1]
        assert 0 <= x <= 100.0 and 0 <= y <= 100.0
        tick(world, 0, rng)
        assert len(country.cities) == 3, "1.2M does not exceed 3 x 500k"

    def test_no_city_at_exact_capacity(self, rng):
        world = make_world(rng)
        country = found(world, ["territory-2-2"], population=500000)
        tick(world, 0, rng)
        assert len(country.cities) == 1


class TestExpansion:
    def test_expansion_claims_adjacent_territory(self, rng):
        world = make_world(rng, expansion_probability=1.0)
        country = found(world, ["territory-2-2"])
        events = tick(world, 1, rng)

        assert len(country.territories) == 2
        new = country.territories[-1]
        assert new.owner_id == country.id
        cx, cy = new.centroid
        assert ((cx - 50.0) ** 2 + (cy - 50.0) ** 2) ** 0.5 <= 50.0

        assert [e.kind for e in events] == [EventKind.EXPANSION]
        latest = world.event_log.latest
        assert latest.attacker == country.name
        assert latest.defender == NEUTRAL_TERRITORY
        assert latest.result == EXPANSION_RESULT
        world.check_invariants()

    def test_contested_territory_goes_to_first_claimant(self, rng):
        cells = [Territory(f"territory-0-{j}", j * 20.0, 0.0, 20.0, 20.0) for j in range(3)]
        grid = TerritoryGrid(cells, rows=1, cols=3, map_width=60.0, map_height=20.0)
        config = quiet_config(rows=1, cols=3, map_width=60.0, map_height=20.0,
                              expansion_probability=1.0)
        world = World(config, rng=rng, grid=grid)
        first = found(world, ["territory-0-0"])
        second = found(world, ["territory-0-2"])

        events = tick(world, 1, rng)

        assert [t.id for t in first.territories] == ["territory-0-0", "territory-0-1"]
        assert [t.id for t in second.territories] == ["territory-0-2"]
        assert len(events) == 1
        world.check_invariants()

    def test_no_expansion_without_free_neighbors(self, rng):
        cells = [Territory("territory-0-0", 0.0, 0.0, 20.0, 20.0)]
        grid = TerritoryGrid(cells, rows=1, cols=1, map_width=20.0, map_height=20.0)
        config = quiet_config(rows=1, cols=1, map_width=20.0, map_height=20.0,
                              expansion_probability=1.0)
        world = World(config, rng=rng, grid=grid)
        country = found(world, ["territory-0-0"])
        assert tick(world, 1, rng) == []
        assert len(country.territories) == 1

    def test_expansion_fills_the_map(self, rng):
        world = make_world(rng, expansion_probability=1.0)
        country = found(world, ["territory-0-0"])
        for _ in range(40):
            tick(world, 1, rng)
            world.check_invariants()
        assert len(country.territories) == 25
        assert world.grid.unowned() == []


class TestNuclearStrike:
    def _armed_pair(self, rng, attacker_era=Era.NUCLEAR, **overrides):
        world = make_world(rng, nuclear_probability=1.0, **overrides)
        attacker = found(world, ["territory-0-0"], name="Atlantis", era_level=attacker_era)
        target = found(world, ["territory-4-4"], name="Lemuria",
                       population=1000000, economy=100000, military=10000,
                       cities=[(90.0, 90.0), (70.0, 70.0)])
        return world, attacker, target

    def test_strike_destroys_one_city(self, rng):
        world, attacker, target = self._armed_pair(rng)
        events = tick(world, 0, rng)

        assert len(target.cities) == 1
        assert target.population == 700000
        assert target.economy == 70000
        assert target.military == 8000
        assert len(attacker.cities) == 1

        assert [e.kind for e in events] == [EventKind.NUCLEAR]
        latest = world.event_log.latest
        assert latest.kind == EventKind.NUCLEAR
        assert (latest.attacker, latest.defender) == ("Atlantis", "Lemuria")
        assert latest.result == NUCLEAR_RESULT
        assert world.combat.nuclear_detonations == 1

    def test_no_strike_before_nuclear_era(self, rng):
        world, _, target = self._armed_pair(rng, attacker_era=Era.MODERN)
        assert tick(world, 0, rng) == []
        assert len(target.cities) == 2

    def test_no_strike_on_cityless_targets(self, rng):
        world, attacker, target = self._armed_pair(rng)
        target.cities.clear()
        result = world.combat.try_nuclear_strike(
            attacker, list(world.countries), world.event_log, "1.01.0", rng)
        assert result is None

        # Without population no replacement city is founded during the tick
        target.population = 0
        assert tick(world, 0, rng) == []
        assert target.cities == []
        assert world.combat.nuclear_detonations == 0

    def test_bomb_required(self, rng):
        world, attacker, target = self._armed_pair(rng)
        attacker.weapons = [Weapon("Missile", Era.NUCLEAR, 10)]
        result = world.combat.try_nuclear_strike(
            attacker, list(world.countries), world.event_log, "1.01.0", rng)
        assert result is None
        assert len(target.cities) == 2

    def test_population_never_negative(self, rng):
        world, _, target = self._armed_pair(rng)
        target.population = 1
        tick(world, 0, rng)
        assert target.population == 1, "30% of 1 floors to zero loss"
        target.cities.append((1.0, 1.0))
        target.population = 0
        tick(world, 0, rng)
        assert target.population == 0


class TestConventionalWar:
    def test_war_is_logged_without_losses(self, rng):
        world = make_world(rng, war_probability=1.0)
        a = found(world, ["territory-0-0"], name="Atlantis")
        b = found(world, ["territory-4-4"], name="Lemuria")
        before = (a.resources(), b.resources())

        events = tick(world, 0, rng)

        assert [e.kind for e in events] == [EventKind.WAR, EventKind.WAR]
        assert (events[0].attacker, events[0].defender) == ("Atlantis", "Lemuria")
        assert (events[1].attacker, events[1].defender) == ("Lemuria", "Atlantis")
        assert all(e.result in (ATTACKER_VICTORY, DEFENDER_VICTORY) for e in events)
        assert (a.resources(), b.resources()) == before
        assert world.combat.wars_fought == 2

    def test_no_war_alone(self, rng):
        world = make_world(rng, war_probability=1.0)
        found(world, ["territory-0-0"])
        assert tick(world, 0, rng) == []

    def test_coin_flip_produces_both_outcomes(self, rng):
        config = quiet_config(war_probability=1.0)
        system = WarSystem(config)
        world = World(config, rng=rng)
        a = found(world, ["territory-0-0"])
        found(world, ["territory-4-4"])
        log = EventLog(capacity=200)
        results = {system.try_conventional_war(a, list(world.countries), log, "1.01.0", rng).result
                   for _ in range(100)}
        assert results == {ATTACKER_VICTORY, DEFENDER_VICTORY}


class TestSecession:
    ROW = ["territory-2-0", "territory-2-1", "territory-2-2", "territory-2-3"]

    def test_four_territories_split_three_and_one(self, rng):
        world = make_world(rng, secession_probability=1.0)
        parent = found(world, self.ROW, name="Atlantis", population=1000000,
                       economy=100000, military=10000, era_level=Era.INDUSTRIAL,
                       cities=[(10.0, 50.0), (30.0, 50.0)])

        events = tick(world, 0, rng)

        assert len(world.countries) == 2
        child = list(world.countries)[1]
        assert len(parent.territories) == 3
        assert len(child.territories) == 1

        territory = child.territories[0]
        assert territory.id in self.ROW
        assert territory.owner_id == child.id
        assert territory.id not in parent.territory_ids()
        assert child.capital == territory.centroid
        assert len(child.cities) == 1 and territory.contains(child.cities[0])

        assert parent.resources() == (700000, 80000, 8500)
        assert child.resources() == (300000, 20000, 1500)
        assert child.era_level == Era.MEDIEVAL
        assert [(w.name, w.count) for w in child.weapons] == \
            [(w.name, w.count * 2 // 10) for w in parent.weapons]

        assert child.diplomacy.enemies == {parent.id}
        assert parent.diplomacy.enemies == set(), "Hostility is one-directional"

        assert [e.kind for e in events] == [EventKind.SECESSION]
        latest = world.event_log.latest
        assert (latest.attacker, latest.defender) == (child.name, "Atlantis")
        assert latest.result == INDEPENDENCE_RESULT
        world.check_invariants()

    def test_never_with_three_territories(self, rng):
        world = make_world(rng, secession_probability=1.0)
        parent = found(world, self.ROW[:3])
        for _ in range(20):
            tick(world, 0, rng)
        assert len(world.countries) == 1
        assert len(parent.territories) == 3

    def test_ancient_child_stays_ancient(self, rng):
        world = make_world(rng, secession_probability=1.0)
        found(world, self.ROW)
        tick(world, 0, rng)
        assert list(world.countries)[1].era_level == 0

    def test_separatists_of_one_tick_share_a_color(self, rng):
        world = make_world(rng, secession_probability=1.0)
        found(world, self.ROW)
        found(world, ["territory-4-0", "territory-4-1", "territory-4-2", "territory-4-3"])

        tick(world, 0, rng)

        children = list(world.countries)[2:]
        assert len(children) == 2
        assert [c.color for c in children] == [COUNTRY_COLORS[2], COUNTRY_COLORS[2]]

    def test_new_country_waits_for_next_tick(self, rng):
        world = make_world(rng, secession_probability=1.0, war_probability=1.0)
        found(world, self.ROW)

        first = tick(world, 0, rng)
        assert [e.kind for e in first] == [EventKind.SECESSION], "Lone parent has nobody to fight"

        second = tick(world, 0, rng)
        assert [e.kind for e in second] == [EventKind.WAR, EventKind.WAR]

    def test_expansion_and_secession_in_same_tick(self, rng):
        world = make_world(rng, expansion_probability=1.0, secession_probability=1.0)
        parent = found(world, self.ROW)
        events = tick(world, 0, rng)
        assert [e.kind for e in events] == [EventKind.EXPANSION, EventKind.SECESSION]
        assert len(parent.territories) == 4
        world.check_invariants()


class TestWorldState:
    def test_events_returned_oldest_first(self, rng):
        world = make_world(rng, war_probability=1.0)
        for tid in ["territory-0-0", "territory-0-4", "territory-4-0"]:
            found(world, [tid])
        events = tick(world, 0, rng)
        assert len(events) == 3
        assert world.event_log.to_list()[:3] == list(reversed(events))

    def test_stats(self, rng):
        world = make_world(rng)
        found(world, ["territory-0-0", "territory-0-1"])
        stats = world.stats()
        assert stats["total_population"] == 100000
        assert stats["living_countries"] == 1
        assert stats["claimed_territories"] == 2
        assert stats["date"] == "1.01.0"

    def test_invariant_check_detects_desync(self, rng):
        world = make_world(rng)
        country = found(world, ["territory-0-0"])
        world.grid.transfer_ownership("territory-0-1", country.id)
        with pytest.raises(InvariantViolation):
            world.check_invariants()

    def test_invariant_check_detects_double_claim(self, rng):
        world = make_world(rng)
        found(world, ["territory-0-0"])
        other = found(world, ["territory-0-1"])
        other.territories.append(world.grid.get("territory-0-0"))
        with pytest.raises(InvariantViolation):
            world.check_invariants()

    def test_invariant_check_detects_negative_resources(self, rng):
        world = make_world(rng)
        country = found(world, ["territory-0-0"])
        country.military = -1
        with pytest.raises(InvariantViolation):
            world.check_invariants()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
