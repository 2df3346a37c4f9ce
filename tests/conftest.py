"""
Pytest configuration and shared fixtures for the test suite.
"""

import pytest

from raidlog.config import wow_data
from raidlog.parser.events import Action

from .helpers import GULDAN, IMP, JAINA, RAGNAROS, THRALL, died, event, hit, line


@pytest.fixture
def restore_registries(monkeypatch):
    """Undo changes the YAML loader makes to the wow_data registries."""
    monkeypatch.setattr(wow_data, "BOSSES", dict(wow_data.BOSSES))
    monkeypatch.setattr(
        wow_data, "CLASS_SPELLS", {k: dict(v) for k, v in wow_data.CLASS_SPELLS.items()}
    )


@pytest.fixture
def sample_log_lines():
    """Layout 3 lines for a short Ragnaros kill with some trash around it."""
    return [
        "# combat log for tests",
        line(0, 'SPELL_AURA_APPLIED,0x0000000000000101,"Thrall",0x514,0x0000000000000101,'
                '"Thrall",0x514,2825,"Bloodlust",0x8,BUFF'),
        line(10, 'SWING_DAMAGE,0x0000000000000101,"Thrall",0x514,0xF130002E0D000301,'
                 '"Ragnaros",0xa48,1200,0,1,nil,nil,nil,nil,nil,nil'),
        line(11, 'SPELL_DAMAGE,0x0000000000000102,"Jaina",0x514,0xF130002E0D000301,'
                 '"Ragnaros",0xa48,27070,"Fireball",0x4,3100,0,4,0,0,0,1,nil,nil'),
        "",
        line(12, 'SPELL_HEAL,0x0000000000000101,"Thrall",0x514,0x0000000000000102,'
                 '"Jaina",0x514,25423,"Chain Heal",0x8,2000,500,0,nil'),
        line(13, 'SPELL_ENERGIZE,0x0000000000000101,"Thrall",0x514,0x0000000000000101,'
                 '"Thrall",0x514,16190,"Mana Tide Totem",0x8,170,0'),
        line(20, 'SWING_MISSED,0xF130002E0D000301,"Ragnaros",0xa48,0x0000000000000101,'
                 '"Thrall",0x514,PARRY'),
        line(50, 'UNIT_DIED,0x0000000000000000,nil,0x80000000,0xF130002E0D000301,'
                 '"Ragnaros",0xa48'),
        line(55, 'SPELL_CAST_SUCCESS,0x0000000000000102,"Jaina",0x514,0x0000000000000000,'
                 'nil,0x80000000,12051,"Evocation",0x40'),
    ]


@pytest.fixture
def pet_stream():
    """An owner summons a pet that then casts its own spells."""
    return [
        event(0, Action.SPELL_SUMMON, GULDAN, IMP, spell_id=688, spell_name="Summon Imp",
              spell_school=0x20),
        event(1, Action.SPELL_CAST_SUCCESS, IMP, RAGNAROS, spell_id=27267,
              spell_name="Firebolt", spell_school=0x4),
        event(2, Action.SPELL_CAST_SUCCESS, GULDAN, RAGNAROS, spell_id=27209,
              spell_name="Shadow Bolt", spell_school=0x20),
        event(3, Action.SPELL_CAST_SUCCESS, IMP, RAGNAROS, spell_id=27072,
              spell_name="Frostbolt", spell_school=0x10),
    ]


@pytest.fixture
def kill_stream():
    """Engagement at t=10, boss death at t=50."""
    return [
        event(0, Action.SPELL_CAST_SUCCESS, THRALL, None, spell_id=2825, spell_name="Bloodlust"),
        hit(10, THRALL, RAGNAROS),
        hit(20, RAGNAROS, JAINA, 800),
        hit(30, JAINA, RAGNAROS),
        died(50, RAGNAROS),
        event(60, Action.SPELL_CAST_SUCCESS, JAINA, None, spell_id=12051, spell_name="Evocation"),
    ]
