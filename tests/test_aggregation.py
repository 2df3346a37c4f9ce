"""
Unit tests for the accumulators and statistic tables.
"""

import pytest

from raidlog.aggregation import (
    ACCUMULATOR_KINDS,
    ACCUMULATORS_BY_NAME,
    MELEE,
    StatTable,
    create_accumulators,
)
from raidlog.aggregation.activity import ActivityAccumulator
from raidlog.aggregation.aura import AuraAccumulator
from raidlog.aggregation.cast import CastAccumulator
from raidlog.aggregation.damage import DamageAccumulator
from raidlog.aggregation.death import DeathAccumulator
from raidlog.aggregation.dispel import DispelAccumulator
from raidlog.aggregation.extraattack import ExtraAttackAccumulator
from raidlog.aggregation.healing import HealingAccumulator
from raidlog.aggregation.index import IndexAccumulator
from raidlog.aggregation.interrupt import InterruptAccumulator
from raidlog.aggregation.power import PowerAccumulator
from raidlog.aggregation.presence import PresenceAccumulator
from raidlog.errors import ConfigurationError
from raidlog.parser.events import Action

from .helpers import BASE_TIME, GULDAN, JAINA, RAGNAROS, THRALL, Unit, died, event, hit


def spell(t, action, actor, target, spell_id, spell_name, **fields):
    return event(t, action, actor, target, spell_id=spell_id, spell_name=spell_name,
                 spell_school=fields.pop("spell_school", 1), **fields)


def energize(t, actor, target, amount, power_type=0, spell_id=16190, spell_name="Mana Tide Totem"):
    return spell(t, Action.SPELL_ENERGIZE, actor, target, spell_id, spell_name,
                 amount=amount, power_type=power_type)


class TestStatTable:
    """Test the sparse table container."""

    def test_entry_created_on_first_write(self):
        """Test that entries appear only once written."""
        table = StatTable(("actor", "target"), ("count",), lambda: {"count": 0})

        assert len(table) == 0
        table.entry("a", "b")["count"] += 1
        table.entry("a", "b")["count"] += 1

        assert table[("a", "b")] == {"count": 2}
        assert ("a", "c") not in table
        assert table.get(("a", "c")) is None

    def test_wrong_key_length(self):
        """Test that keys must have one part per dimension."""
        table = StatTable(("actor",), ("count",))

        with pytest.raises(KeyError):
            table.entry("a", "b")

    def test_frozen_table_is_read_only(self):
        """Test that a frozen table rejects writes and its records are immutable."""
        table = StatTable(("actor",), ("spans",))
        table.entry("a")["spans"] = [[1, 2]]
        table.freeze()

        with pytest.raises(TypeError):
            table.entry("b")
        with pytest.raises(TypeError):
            table[("a",)]["spans"] = []
        assert table[("a",)]["spans"] == ((1, 2),)

    def test_select(self):
        """Test filtering by key dimension."""
        table = StatTable(("actor", "target"), ("count",))
        table.entry("a", "x")["count"] = 1
        table.entry("b", "x")["count"] = 2
        table.entry("a", "y")["count"] = 3

        assert set(table.select(target="x")) == {("a", "x"), ("b", "x")}
        assert set(table.select(actor="a", target="y")) == {("a", "y")}
        with pytest.raises(KeyError):
            table.select(spell=1)

    def test_to_rows(self):
        """Test flattening to plain rows."""
        table = StatTable(("actor",), ("deaths",))
        table.entry("a")["deaths"] = [{"time": 1}]
        table.freeze()

        assert table.to_rows() == [{"actor": "a", "deaths": [{"time": 1}]}]


class TestLifecycle:
    """Test the shared accumulator lifecycle."""

    @pytest.mark.parametrize("kind", ACCUMULATOR_KINDS, ids=lambda k: k.name)
    def test_rerun_is_identical(self, kind, kill_stream):
        """Test that running the same window twice gives equal tables."""
        accumulator = kind()
        events = kill_stream + [
            energize(15, THRALL, THRALL, 170),
            spell(16, Action.SPELL_AURA_APPLIED, THRALL, THRALL, 2825, "Bloodlust",
                  aura_type="BUFF"),
        ]

        first = accumulator.run(events)
        second = accumulator.run(events)

        assert first == second
        assert first.frozen
        assert first.key_dimensions == kind.KEY

    def test_finish_before_start(self):
        """Test that finishing without starting is an error."""
        with pytest.raises(RuntimeError):
            CastAccumulator().finish()

    def test_ignores_other_actions(self, kill_stream):
        """Test that unhandled actions leave the table empty."""
        assert len(PowerAccumulator().run(kill_stream)) == 0


class TestRegistry:
    """Test accumulator lookup by name."""

    def test_all_by_default(self):
        """Test that every kind is created when no names are given."""
        names = [a.name for a in create_accumulators()]

        assert names == [kind.name for kind in ACCUMULATOR_KINDS]
        assert len(set(names)) == len(names)

    def test_subset(self):
        """Test creating selected accumulators in registry order."""
        names = [a.name for a in create_accumulators(["power", "damage"])]

        assert names == ["damage", "power"]

    def test_unknown_name(self):
        """Test that an unknown name is a configuration error."""
        with pytest.raises(ConfigurationError):
            create_accumulators(["damage", "threat"])

    def test_names(self):
        """Test the registered names."""
        assert set(ACCUMULATORS_BY_NAME) == {
            "activity", "aura", "cast", "damage", "death", "dispel",
            "extraattack", "healing", "index", "interrupt", "power", "presence",
        }


class TestPower:
    """Test the power accumulator."""

    def test_recipient_keyed(self):
        """Test that gains are keyed by recipient, spell and granter."""
        table = PowerAccumulator().run([energize(1, THRALL, JAINA, 300)])

        assert (JAINA.id, 16190, THRALL.id) in table
        assert (THRALL.id, 16190, JAINA.id) not in table

    def test_additive(self):
        """Test that amounts and counts add up per key."""
        events = [
            energize(1, THRALL, JAINA, 300),
            energize(2, THRALL, JAINA, 200),
            energize(3, THRALL, THRALL, 170),
        ]
        table = PowerAccumulator().run(events)

        assert table[(JAINA.id, 16190, THRALL.id)] == {"count": 2, "type": 0, "amount": 500}
        assert table[(THRALL.id, 16190, THRALL.id)]["amount"] == 170
        assert sum(entry["amount"] for entry in table.select(actor=JAINA.id).values()) == 500

    def test_periodic(self):
        """Test that periodic energizes count as well."""
        e = spell(1, Action.SPELL_PERIODIC_ENERGIZE, JAINA, JAINA, 12051, "Evocation",
                  amount=900, power_type=0)

        assert PowerAccumulator().run([e])[(JAINA.id, 12051, JAINA.id)]["amount"] == 900


class TestDamage:
    """Test the damage accumulator."""

    def test_hits_and_crits(self):
        """Test the hit and crit breakdowns."""
        events = [
            hit(1, THRALL, RAGNAROS, 1000),
            hit(2, THRALL, RAGNAROS, 1400),
            hit(3, THRALL, RAGNAROS, 2500, critical=True),
        ]
        entry = DamageAccumulator().run(events)[(THRALL.id, MELEE, RAGNAROS.id)]

        assert entry["count"] == 3
        assert entry["total"] == 4900
        assert (entry["hit_count"], entry["hit_min"], entry["hit_max"]) == (2, 1000, 1400)
        assert (entry["crit_count"], entry["crit_total"]) == (1, 2500)
        assert entry["tick_count"] == 0

    def test_misses_count(self):
        """Test that avoided attacks count toward count but not total."""
        events = [
            hit(1, RAGNAROS, THRALL, 3000, crushing=True),
            event(2, Action.SWING_MISSED, RAGNAROS, THRALL, miss_type="PARRY"),
            event(3, Action.SWING_MISSED, RAGNAROS, THRALL, miss_type="ABSORB", amount=800),
        ]
        entry = DamageAccumulator().run(events)[(RAGNAROS.id, MELEE, THRALL.id)]

        assert entry["count"] == 3
        assert entry["total"] == 3000
        assert entry["crushing"] == 1
        assert entry["parry"] == 1
        assert entry["absorb"] == 1
        assert entry["absorbed"] == 800

    def test_partial_resist_and_ticks(self):
        """Test partial resists and periodic damage."""
        events = [
            spell(1, Action.SPELL_DAMAGE, JAINA, RAGNAROS, 27070, "Fireball", amount=2400,
                  resisted=600, critical=False),
            spell(2, Action.SPELL_PERIODIC_DAMAGE, JAINA, RAGNAROS, 27070, "Fireball",
                  amount=200),
        ]
        entry = DamageAccumulator().run(events)[(JAINA.id, 27070, RAGNAROS.id)]

        assert entry["partial_resist"] == 1
        assert entry["resisted"] == 600
        assert entry["tick_count"] == 1
        assert entry["hit_count"] == 1
        assert entry["total"] == 2600

    def test_environmental(self):
        """Test that environmental damage is keyed by its type."""
        e = event(1, Action.ENVIRONMENTAL_DAMAGE, None, THRALL, environmental_type="LAVA",
                  amount=500)
        table = DamageAccumulator().run([e])

        assert table[(None, "LAVA", THRALL.id)]["total"] == 500


class TestHealing:
    """Test the healing accumulator."""

    def test_effective_and_overheal(self):
        """Test that overhealing is split from effective healing."""
        events = [
            spell(1, Action.SPELL_HEAL, THRALL, JAINA, 25423, "Chain Heal", amount=2000,
                  overheal=500, critical=False),
            spell(2, Action.SPELL_HEAL, THRALL, JAINA, 25423, "Chain Heal", amount=3000,
                  overheal=0, critical=True),
        ]
        entry = HealingAccumulator().run(events)[(THRALL.id, 25423, JAINA.id)]

        assert entry["total"] == 5000
        assert entry["effective"] == 4500
        assert entry["overheal"] == 500
        assert entry["crit_count"] == 1
        assert entry["hit_count"] == 1

    def test_missing_overheal(self):
        """Test that heals without an overheal field are fully effective."""
        e = spell(1, Action.SPELL_PERIODIC_HEAL, THRALL, JAINA, 26982, "Rejuvenation",
                  amount=400)
        entry = HealingAccumulator().run([e])[(THRALL.id, 26982, JAINA.id)]

        assert entry["effective"] == 400
        assert entry["tick_count"] == 1


class TestAura:
    """Test the aura accumulator."""

    def aura(self, t, action, target=THRALL, spell_id=2825, spell_name="Bloodlust"):
        return spell(t, action, THRALL, target, spell_id, spell_name, aura_type="BUFF")

    def test_uptime(self):
        """Test a gain and fade inside the window."""
        events = [
            hit(0, THRALL, RAGNAROS),
            self.aura(10, Action.SPELL_AURA_APPLIED),
            self.aura(50, Action.SPELL_AURA_REMOVED),
        ]
        entry = AuraAccumulator().run(events)[(THRALL.id, 2825)]

        assert entry["gains"] == 1
        assert entry["fades"] == 1
        assert entry["time"] == 40
        assert entry["type"] == "BUFF"
        assert entry["spans"] == ((BASE_TIME + 10, BASE_TIME + 50),)

    def test_up_before_window(self):
        """Test that a fade without a gain counts from the window start."""
        events = [hit(0, THRALL, RAGNAROS), self.aura(30, Action.SPELL_AURA_REMOVED)]
        entry = AuraAccumulator().run(events)[(THRALL.id, 2825)]

        assert entry["gains"] == 0
        assert entry["time"] == 30

    def test_up_after_window(self):
        """Test that an aura still up closes at the last event."""
        events = [self.aura(10, Action.SPELL_AURA_APPLIED), hit(70, THRALL, RAGNAROS)]
        entry = AuraAccumulator().run(events)[(THRALL.id, 2825)]

        assert entry["fades"] == 0
        assert entry["time"] == 60

    def test_holder_is_target(self):
        """Test that the aura is keyed by the unit holding it."""
        events = [self.aura(1, Action.SPELL_AURA_APPLIED, target=JAINA)]
        table = AuraAccumulator().run(events)

        assert (JAINA.id, 2825) in table
        assert (THRALL.id, 2825) not in table


class TestDeath:
    """Test the death accumulator."""

    def test_killer_and_autopsy(self):
        """Test that a death records the last damager and the events before it."""
        events = [
            hit(1, RAGNAROS, THRALL, 3000),
            spell(2, Action.SPELL_HEAL, JAINA, THRALL, 25235, "Flash Heal", amount=1000),
            hit(3, RAGNAROS, THRALL, 5000),
            died(4, THRALL),
        ]
        entry = DeathAccumulator().run(events)[(THRALL.id,)]

        assert entry["count"] == 1
        death = entry["deaths"][0]
        assert death["time"] == BASE_TIME + 4
        assert death["killer"] == RAGNAROS.id
        assert [step["amount"] for step in death["autopsy"]] == [3000, 1000, 5000]

    def test_autopsy_length(self):
        """Test that the autopsy keeps only the most recent events."""
        events = [hit(t, RAGNAROS, THRALL, t) for t in range(1, 8)] + [died(9, THRALL)]
        death = DeathAccumulator(autopsy_length=3).run(events)[(THRALL.id,)]["deaths"][0]

        assert [step["amount"] for step in death["autopsy"]] == [5, 6, 7]

    def test_kill_then_died_is_one_death(self):
        """Test that a credited kill followed by a death event counts once."""
        events = [
            hit(1, THRALL, RAGNAROS),
            event(2, Action.PARTY_KILL, JAINA, RAGNAROS),
            died(2, RAGNAROS),
        ]
        entry = DeathAccumulator().run(events)[(RAGNAROS.id,)]

        assert entry["count"] == 1
        assert entry["deaths"][0]["killer"] == JAINA.id

    def test_kill_does_not_absorb_later_death(self):
        """Test that a namesake dying after a kill is a second death."""
        hound = Unit("Core Hound", "Core Hound", 0)
        slayer = Unit("Thrall", "Thrall", 0)
        events = [
            event(10, Action.PARTY_KILL, slayer, hound),
            died(20, hound),
        ]
        entry = DeathAccumulator().run(events)[(hound.id,)]

        assert entry["count"] == 2
        assert [d["time"] for d in entry["deaths"]] == [BASE_TIME + 10, BASE_TIME + 20]

    def test_repeated_deaths(self):
        """Test that a unit can die more than once in a window."""
        events = [died(1, THRALL), hit(5, RAGNAROS, THRALL), died(6, THRALL)]
        entry = DeathAccumulator().run(events)[(THRALL.id,)]

        assert entry["count"] == 2
        assert entry["deaths"][0]["killer"] is None
        assert entry["deaths"][1]["killer"] == RAGNAROS.id


class TestActivity:
    """Test the activity accumulator."""

    def test_spans(self):
        """Test that gaps longer than the threshold split spans."""
        events = [hit(t, THRALL, RAGNAROS) for t in (0, 2, 4, 20, 23)]
        entry = ActivityAccumulator().run(events)[(THRALL.id, RAGNAROS.id)]

        assert entry["time"] == 7
        assert entry["start"] == BASE_TIME
        assert entry["end"] == BASE_TIME + 23

    def test_misses_count_as_activity(self):
        """Test that missed attacks extend activity."""
        events = [hit(0, THRALL, RAGNAROS),
                  event(3, Action.SWING_MISSED, THRALL, RAGNAROS, miss_type="DODGE")]

        assert ActivityAccumulator().run(events)[(THRALL.id, RAGNAROS.id)]["time"] == 3


class TestSmallAccumulators:
    """Test the counting and indexing accumulators."""

    def test_presence(self, kill_stream):
        """Test first and last action per actor."""
        table = PresenceAccumulator().run(kill_stream)

        assert table[(THRALL.id,)] == {"start": BASE_TIME, "end": BASE_TIME + 10, "total": 10}
        assert table[(JAINA.id,)]["total"] == 30
        assert (None,) not in table

    def test_index(self, pet_stream):
        """Test the id to name cross reference."""
        table = IndexAccumulator().run(pet_stream)

        assert table[("actor", GULDAN.id)]["name"] == "Guldan"
        assert table[("spell", 27267)]["name"] == "Firebolt"
        assert table[("actor", RAGNAROS.id)]["name"] == "Ragnaros"

    def test_cast(self, pet_stream):
        """Test cast counting."""
        table = CastAccumulator().run(pet_stream + pet_stream[2:3])

        assert table[(GULDAN.id, 27209, RAGNAROS.id)]["count"] == 2
        assert len(table) == 3

    def test_interrupt(self):
        """Test that interrupts are keyed by the interrupted spell."""
        e = spell(1, Action.SPELL_INTERRUPT, THRALL, RAGNAROS, 25454, "Earth Shock",
                  extra_spell_id=20566, extra_spell_name="Wrath of Ragnaros",
                  extra_spell_school=4)
        table = InterruptAccumulator().run([e, e])

        assert table[(THRALL.id, 25454, RAGNAROS.id, 20566)]["count"] == 2

    def test_dispel(self):
        """Test dispels, steals and resisted dispels."""
        fields = dict(extra_spell_id=19659, extra_spell_name="Ignite Mana", extra_spell_school=4)
        events = [
            spell(1, Action.SPELL_DISPEL, JAINA, THRALL, 527, "Dispel Magic", **fields),
            spell(2, Action.SPELL_DISPEL_FAILED, JAINA, THRALL, 527, "Dispel Magic", **fields),
            spell(3, Action.SPELL_STOLEN, JAINA, RAGNAROS, 30449, "Spellsteal", **fields),
        ]
        table = DispelAccumulator().run(events)

        assert table[(JAINA.id, 527, THRALL.id, 19659)] == {"count": 1, "resisted": 1}
        assert table[(JAINA.id, 30449, RAGNAROS.id, 19659)]["count"] == 1

    def test_extra_attacks(self):
        """Test that swings after a proc are credited to it."""
        events = [
            spell(1, Action.SPELL_EXTRA_ATTACKS, THRALL, THRALL, 15494, "Fury of Forgemaster",
                  amount=2),
            hit(1.1, THRALL, RAGNAROS, 900),
            event(1.2, Action.SWING_MISSED, THRALL, RAGNAROS, miss_type="DODGE"),
            hit(3, THRALL, RAGNAROS, 1000),
        ]
        entry = ExtraAttackAccumulator().run(events)[(THRALL.id, 15494)]

        assert entry == {"count": 1, "amount": 2, "damage": 900}
