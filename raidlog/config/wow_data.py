"""
World of Warcraft data mappings used for classification and segmentation.

This module contains configurable tables: spells exclusive to one class,
power types characteristic of a class, spells that link a pet to its owner,
and the boss registry used to recognize encounters. Entries can be extended
from YAML through the config loader.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple


class PowerType:
    """Power type ids as written in energize events."""

    MANA = 0
    RAGE = 1
    FOCUS = 2
    ENERGY = 3
    HAPPINESS = 4
    RUNIC_POWER = 6


POWER_TYPE_NAMES: Dict[int, str] = {
    PowerType.MANA: "mana",
    PowerType.RAGE: "rage",
    PowerType.FOCUS: "focus",
    PowerType.ENERGY: "energy",
    PowerType.HAPPINESS: "happiness",
    PowerType.RUNIC_POWER: "runic power",
}


# Spells only one class can cast, by class
CLASS_SPELLS: Dict[str, Dict[int, str]] = {
    "Warrior": {
        12294: "Mortal Strike",
        30330: "Mortal Strike",
        23881: "Bloodthirst",
        30335: "Bloodthirst",
        23922: "Shield Slam",
        30356: "Shield Slam",
        29707: "Heroic Strike",
        30324: "Heroic Strike",
        1680: "Whirlwind",
        25236: "Execute",
        2048: "Battle Shout",
        469: "Commanding Shout",
        25225: "Sunder Armor",
        30022: "Devastate",
        30033: "Rampage",
        25242: "Slam",
        871: "Shield Wall",
        1719: "Recklessness",
        2687: "Bloodrage",
        25275: "Intercept",
        6554: "Pummel",
        29704: "Shield Bash",
    },
    "Paladin": {
        27136: "Holy Light",
        27137: "Flash of Light",
        20375: "Seal of Command",
        20271: "Judgement",
        27173: "Consecration",
        27179: "Holy Shield",
        35395: "Crusader Strike",
        25898: "Greater Blessing of Kings",
        27155: "Seal of Righteousness",
        32700: "Avenger's Shield",
        642: "Divine Shield",
        25780: "Righteous Fury",
        33072: "Holy Shock",
        20272: "Illumination",
    },
    "Hunter": {
        34120: "Steady Shot",
        27019: "Arcane Shot",
        27021: "Multi-Shot",
        27065: "Aimed Shot",
        27016: "Serpent Sting",
        75: "Auto Shot",
        14325: "Hunter's Mark",
        34026: "Kill Command",
        3045: "Rapid Fire",
        19574: "Bestial Wrath",
        5384: "Feign Death",
        34477: "Misdirection",
        34074: "Aspect of the Viper",
        27046: "Mend Pet",
        1539: "Feed Pet",
    },
    "Rogue": {
        26862: "Sinister Strike",
        26865: "Eviscerate",
        6774: "Slice and Dice",
        26863: "Backstab",
        34413: "Mutilate",
        26867: "Rupture",
        38768: "Kick",
        13750: "Adrenaline Rush",
        13877: "Blade Flurry",
        27187: "Deadly Poison VII",
        26889: "Vanish",
        5938: "Shiv",
        26864: "Hemorrhage",
        35553: "Combat Potency",
    },
    "Priest": {
        25213: "Greater Heal",
        25235: "Flash Heal",
        25222: "Renew",
        25316: "Prayer of Healing",
        25218: "Power Word: Shield",
        25368: "Shadow Word: Pain",
        25375: "Mind Blast",
        25387: "Mind Flay",
        34917: "Vampiric Touch",
        33076: "Prayer of Mending",
        34866: "Circle of Healing",
        34433: "Shadowfiend",
        25389: "Power Word: Fortitude",
        25384: "Holy Fire",
        25431: "Inner Fire",
        15286: "Vampiric Embrace",
        10060: "Power Infusion",
    },
    "Death Knight": {
        49998: "Death Strike",
        55050: "Heart Strike",
        49020: "Obliterate",
        45477: "Icy Touch",
        45462: "Plague Strike",
        45902: "Blood Strike",
        55090: "Scourge Strike",
        47541: "Death Coil",
        49143: "Frost Strike",
        49184: "Howling Blast",
        57330: "Horn of Winter",
        42650: "Army of the Dead",
        46584: "Raise Dead",
        47528: "Mind Freeze",
        48707: "Anti-Magic Shell",
    },
    "Shaman": {
        25449: "Lightning Bolt",
        25442: "Chain Lightning",
        25423: "Chain Heal",
        25420: "Lesser Healing Wave",
        25396: "Healing Wave",
        25454: "Earth Shock",
        25457: "Flame Shock",
        25464: "Frost Shock",
        17364: "Stormstrike",
        25504: "Windfury Attack",
        32594: "Earth Shield",
        33736: "Water Shield",
        2825: "Bloodlust",
        32182: "Heroism",
        16190: "Mana Tide Totem",
        25587: "Windfury Totem",
        30706: "Totem of Wrath",
        30823: "Shamanistic Rage",
    },
    "Mage": {
        27070: "Fireball",
        27072: "Frostbolt",
        30451: "Arcane Blast",
        27074: "Scorch",
        27079: "Fire Blast",
        38699: "Arcane Missiles",
        33938: "Pyroblast",
        30455: "Ice Lance",
        27087: "Cone of Cold",
        12051: "Evocation",
        12472: "Icy Veins",
        12042: "Arcane Power",
        11129: "Combustion",
        2139: "Counterspell",
        27127: "Arcane Brilliance",
        30482: "Molten Armor",
        45438: "Ice Block",
        31687: "Summon Water Elemental",
    },
    "Warlock": {
        27209: "Shadow Bolt",
        27215: "Immolate",
        27216: "Corruption",
        27218: "Curse of Agony",
        27228: "Curse of the Elements",
        27226: "Curse of Recklessness",
        32231: "Incinerate",
        27243: "Seed of Corruption",
        30405: "Unstable Affliction",
        30911: "Siphon Life",
        27222: "Life Tap",
        27265: "Dark Pact",
        30545: "Soul Fire",
        28189: "Fel Armor",
        688: "Summon Imp",
        697: "Summon Voidwalker",
        712: "Summon Succubus",
        691: "Summon Felhunter",
        30146: "Summon Felguard",
        30546: "Shadowburn",
        30912: "Conflagrate",
        18788: "Demonic Sacrifice",
    },
    "Druid": {
        26982: "Rejuvenation",
        26980: "Regrowth",
        33763: "Lifebloom",
        26979: "Healing Touch",
        18562: "Swiftmend",
        26983: "Tranquility",
        26988: "Moonfire",
        26986: "Starfire",
        26985: "Wrath",
        27013: "Insect Swarm",
        33983: "Mangle (Cat)",
        33987: "Mangle (Bear)",
        27002: "Shred",
        27008: "Rip",
        24248: "Ferocious Bite",
        26996: "Maul",
        33745: "Lacerate",
        29166: "Innervate",
        26991: "Gift of the Wild",
        768: "Cat Form",
        9634: "Dire Bear Form",
        24858: "Moonkin Form",
        33891: "Tree of Life",
        27011: "Faerie Fire (Feral)",
    },
}


# Power types only one class draws from. Weak evidence: druid shapeshifts use rage and energy too.
POWER_CLASSES: Dict[int, str] = {
    PowerType.RAGE: "Warrior",
    PowerType.ENERGY: "Rogue",
    PowerType.RUNIC_POWER: "Death Knight",
}


# Spells an owner casts on its own pet
PET_LINK_SPELLS: Dict[int, str] = {
    136: "Mend Pet",
    27046: "Mend Pet",
    1539: "Feed Pet Effect",
    34953: "Go for the Throat",
    27265: "Dark Pact",
    27259: "Health Funnel",
    18788: "Demonic Sacrifice",
    32554: "Mana Feed",
}

PET_LINK_SPELL_NAMES = frozenset(PET_LINK_SPELLS.values())


def build_spell_index() -> Tuple[Dict[int, str], Dict[str, str]]:
    """
    Build lookup indexes from CLASS_SPELLS.

    Returns:
        Tuple of (spell id -> class, spell name -> class)
    """
    by_id: Dict[int, str] = {}
    by_name: Dict[str, str] = {}
    for class_name, spells in CLASS_SPELLS.items():
        for spell_id, spell_name in spells.items():
            by_id[spell_id] = class_name
            by_name[spell_name] = class_name
    return by_id, by_name


@dataclass(frozen=True)
class BossDefinition:
    """
    A raid encounter and the units that take part in it.

    Any of ``units`` starts an attempt; the attempt is a kill once every unit
    in ``kill_units`` has died.
    """

    name: str
    units: Tuple[str, ...]
    kill_units: Tuple[str, ...]
    timeout: Optional[float] = None

    @classmethod
    def single(cls, name: str, timeout: Optional[float] = None) -> "BossDefinition":
        return cls(name=name, units=(name,), kill_units=(name,), timeout=timeout)

    @classmethod
    def group(cls, name: str, units: Iterable[str], kill_units: Optional[Iterable[str]] = None,
              timeout: Optional[float] = None) -> "BossDefinition":
        units = tuple(units)
        return cls(name=name, units=units, kill_units=tuple(kill_units or units), timeout=timeout)


_SINGLE_BOSSES = (
    # Classic
    "Onyxia", "Ragnaros",
    # Karazhan
    "Moroes", "Maiden of Virtue", "The Curator", "Shade of Aran", "Terestian Illhoof",
    "Netherspite", "Prince Malchezaar", "Nightbane",
    # Gruul's Lair
    "Gruul the Dragonkiller",
    # Serpentshrine Cavern
    "Hydross the Unstable", "The Lurker Below", "Leotheras the Blind",
    "Morogrim Tidewalker", "Lady Vashj",
    # Tempest Keep
    "Al'ar", "Void Reaver", "High Astromancer Solarian", "Kael'thas Sunstrider",
    # Mount Hyjal
    "Rage Winterchill", "Anetheron", "Kaz'rogal", "Azgalor", "Archimonde",
    # Black Temple
    "High Warlord Naj'entus", "Supremus", "Shade of Akama", "Teron Gorefiend",
    "Gurtogg Bloodboil", "Mother Shahraz", "Illidan Stormrage",
    # Sunwell Plateau
    "Brutallus", "Felmyst", "Kil'jaeden",
)

BOSSES: Dict[str, BossDefinition] = {name: BossDefinition.single(name) for name in _SINGLE_BOSSES}

BOSSES.update({
    boss.name: boss
    for boss in (
        BossDefinition.group(
            "Attumen the Huntsman", ("Midnight", "Attumen the Huntsman"), ("Attumen the Huntsman",)
        ),
        BossDefinition.group(
            "High King Maulgar",
            ("High King Maulgar", "Kiggler the Crazed", "Blindeye the Seer",
             "Olm the Summoner", "Krosh Firehand"),
        ),
        BossDefinition.group(
            "Magtheridon", ("Magtheridon", "Hellfire Channeler"), ("Magtheridon",)
        ),
        BossDefinition.group(
            "Fathom-Lord Karathress",
            ("Fathom-Lord Karathress", "Fathom-Guard Sharkkis", "Fathom-Guard Tidalvess",
             "Fathom-Guard Caribdis"),
            ("Fathom-Lord Karathress",),
        ),
        BossDefinition.group(
            "Reliquary of Souls",
            ("Essence of Suffering", "Essence of Desire", "Essence of Anger"),
            ("Essence of Anger",),
        ),
        BossDefinition.group(
            "Illidari Council",
            ("Gathios the Shatterer", "High Nethermancer Zerevor", "Lady Malande",
             "Veras Darkshadow"),
        ),
        BossDefinition.group(
            "Kalecgos", ("Kalecgos", "Sathrovarr the Corruptor"), ("Sathrovarr the Corruptor",)
        ),
        BossDefinition.group("Eredar Twins", ("Lady Sacrolash", "Grand Warlock Alythess")),
        BossDefinition.group("M'uru", ("M'uru", "Entropius"), ("Entropius",)),
    )
})


def build_unit_index(bosses: Optional[Dict[str, BossDefinition]] = None) -> Dict[str, BossDefinition]:
    """
    Map every encounter unit name to its boss definition.

    Args:
        bosses: Boss registry, defaults to BOSSES

    Returns:
        Dictionary of unit name -> BossDefinition
    """
    index: Dict[str, BossDefinition] = {}
    for boss in (bosses if bosses is not None else BOSSES).values():
        for unit in boss.units:
            index[unit] = boss
    return index


def get_power_type_name(power_type: int) -> str:
    """Get a human-readable name for a power type id."""
    return POWER_TYPE_NAMES.get(power_type, f"power {power_type}")
