"""
End-to-end tests for the processing pipeline.
"""

import pytest

from raidlog.config.settings import ParserSettings
from raidlog.errors import ConfigurationError, OutputError
from raidlog.models.encounter import Outcome
from raidlog.parser.parser import FileLineSource
from raidlog.processing import CombatLogPipeline, process_log
from raidlog.processing import pipeline as pipeline_module
from raidlog.processing.pipeline import ProcessingContext

from .helpers import BASE_TIME, JAINA, RAGNAROS, THRALL, YEAR, line


def settings(**kwargs):
    return ParserSettings(version=3, year=YEAR, **kwargs)


class RecordingConsumer:
    def __init__(self):
        self.results = []

    def write(self, result):
        self.results.append(result)


class FailingConsumer:
    def write(self, result):
        raise OutputError("disk full", encounter_key=result.encounter.key)


@pytest.fixture
def wipe_lines(sample_log_lines):
    """The sample log without the boss death."""
    return [l for l in sample_log_lines if "UNIT_DIED" not in l]


@pytest.fixture
def legacy_lines():
    """A sentence-style Ragnaros kill recorded by Thrall, who dies mid-fight."""
    return [
        line(10, "You hit Ragnaros for 1200."),
        line(11, "Jaina's Fireball hits Ragnaros for 3100 Fire damage."),
        line(20, "Ragnaros hits you for 4000."),
        line(21, "You die."),
        line(30, "Jaina's Fireball hits Ragnaros for 2900 Fire damage."),
        line(50, "Ragnaros dies."),
    ]


def legacy_settings(**kwargs):
    return ParserSettings(version=1, logger_name="Thrall", year=YEAR, **kwargs)


class TestRun:
    """Test a full pipeline run."""

    def test_kill(self, sample_log_lines):
        """Test that the sample log yields one kill with all tables."""
        results = CombatLogPipeline(settings()).run(sample_log_lines)

        assert len(results) == 1
        enc = results[0].encounter
        assert enc.boss_name == "Ragnaros"
        assert enc.outcome is Outcome.KILL
        assert enc.start_time == BASE_TIME + 10
        assert enc.end_time == BASE_TIME + 50
        assert len(results[0].tables) == 12

    def test_tables(self, sample_log_lines):
        """Test table contents for the encounter window."""
        tables = CombatLogPipeline(settings()).run(sample_log_lines)[0].tables

        assert tables["damage"][(JAINA.id, 27070, RAGNAROS.id)]["crit_count"] == 1
        assert tables["damage"][(RAGNAROS.id, 0, THRALL.id)]["parry"] == 1
        assert tables["healing"][(THRALL.id, 25423, JAINA.id)]["effective"] == 1500
        assert tables["power"][(THRALL.id, 16190, THRALL.id)]["amount"] == 170
        assert tables["death"][(RAGNAROS.id,)]["count"] == 1
        # The aura before the engagement and the cast after the kill are outside the window
        assert len(tables["aura"]) == 0
        assert len(tables["cast"]) == 0

    def test_actors_restricted_to_participants(self, sample_log_lines):
        """Test that each result only carries the encounter's participants."""
        result = CombatLogPipeline(settings()).run(sample_log_lines)[0]

        assert set(result.actors) == result.encounter.participant_ids
        assert set(result.actors) == {THRALL.id, JAINA.id, RAGNAROS.id}

    def test_stats(self, sample_log_lines):
        """Test the statistics of the last run."""
        pipeline = CombatLogPipeline(settings())
        assert pipeline.get_stats() == {}

        pipeline.run(sample_log_lines)
        stats = pipeline.get_stats()

        assert stats["parser"]["events_processed"] == 8
        assert stats["parser"]["skipped_lines"] == 1
        assert stats["encounters"] == 1

    def test_process_log(self, sample_log_lines):
        """Test the one-shot helper."""
        assert len(process_log(sample_log_lines, settings())) == 1


class TestFiltering:
    """Test encounter selection."""

    def test_wipes_dropped_by_default(self, wipe_lines):
        """Test that wipes are dropped unless attempts are included."""
        assert CombatLogPipeline(settings()).run(wipe_lines) == []

    def test_include_attempts(self, wipe_lines):
        """Test that attempts can be kept."""
        results = CombatLogPipeline(settings(include_attempts=True)).run(wipe_lines)

        assert len(results) == 1
        assert results[0].encounter.outcome is Outcome.WIPE

    def test_min_length(self, sample_log_lines):
        """Test that short encounters are dropped."""
        assert CombatLogPipeline(settings(min_encounter_length=60)).run(sample_log_lines) == []
        assert len(CombatLogPipeline(settings(min_encounter_length=40)).run(sample_log_lines)) == 1

    def test_accumulator_subset(self, sample_log_lines):
        """Test running only the configured accumulators."""
        results = CombatLogPipeline(settings(accumulators=("damage", "death"))).run(sample_log_lines)

        assert set(results[0].tables) == {"damage", "death"}

    def test_unknown_accumulator(self):
        """Test that unknown accumulator names fail before any work."""
        with pytest.raises(ConfigurationError):
            CombatLogPipeline(settings(accumulators=("threat",)))

    def test_invalid_settings(self):
        """Test that invalid settings are rejected."""
        with pytest.raises(ConfigurationError):
            CombatLogPipeline(ParserSettings(version=9))


class TestLegacyLog:
    """Test sentence-style logs end to end."""

    def test_kill_survives_logger_death(self, legacy_lines):
        """Test that the logger dying does not end the attempt early."""
        results = CombatLogPipeline(legacy_settings(include_attempts=True)).run(legacy_lines)

        assert [r.encounter.outcome for r in results] == [Outcome.KILL]
        enc = results[0].encounter
        assert enc.start_time == BASE_TIME + 10
        assert enc.end_time == BASE_TIME + 50

    def test_tables(self, legacy_lines):
        """Test that name-keyed units flow into the tables."""
        tables = CombatLogPipeline(legacy_settings()).run(legacy_lines)[0].tables

        assert tables["damage"][("Jaina", "Fireball", "Ragnaros")]["total"] == 6000
        assert tables["damage"][("Thrall", 0, "Ragnaros")]["total"] == 1200
        assert tables["death"][("Thrall",)]["count"] == 1
        assert tables["death"][("Ragnaros",)]["count"] == 1

    def test_wipe(self, legacy_lines):
        """Test that a fight without a boss death is kept as a wipe."""
        lines = [l for l in legacy_lines if not l.endswith("Ragnaros dies.")]

        assert CombatLogPipeline(legacy_settings()).run(lines) == []

        results = CombatLogPipeline(legacy_settings(include_attempts=True)).run(lines)
        assert [r.encounter.outcome for r in results] == [Outcome.WIPE]
        assert results[0].encounter.end_time == BASE_TIME + 30

    def test_raid_death_only_for_flagged_layouts(self):
        """Test that raid death wipes are kept for layouts with player flags."""
        assert not ProcessingContext.create(legacy_settings()).segmenter.wipe_on_raid_death
        assert ProcessingContext.create(settings()).segmenter.wipe_on_raid_death


class TestExecution:
    """Test that execution strategies give identical results."""

    def test_year_resolved_once(self, sample_log_lines, tmp_path, monkeypatch):
        """Test that re-scans decode timestamps against the year of the first pass."""
        path = tmp_path / "WoWCombatLog.txt"
        path.write_text("\n".join(sample_log_lines) + "\n", encoding="utf-8")
        years = iter([YEAR, YEAR + 1])
        monkeypatch.setattr(pipeline_module, "current_year", lambda: next(years))

        pipeline = CombatLogPipeline(ParserSettings(version=3, hold_events=False))
        results = pipeline.run(FileLineSource(path))

        assert pipeline.context.year == YEAR
        assert results[0].encounter.start_time == BASE_TIME + 10
        assert results[0].tables["presence"][(THRALL.id,)]["start"] == BASE_TIME + 10

    def test_replay_matches_held(self, sample_log_lines, tmp_path):
        """Test that re-reading the file gives the same tables as holding events."""
        path = tmp_path / "WoWCombatLog.txt"
        path.write_text("\n".join(sample_log_lines) + "\n", encoding="utf-8")

        held = CombatLogPipeline(settings()).run(FileLineSource(path))
        replayed = CombatLogPipeline(settings(hold_events=False)).run(FileLineSource(path))

        assert [r.encounter for r in held] == [r.encounter for r in replayed]
        assert held[0].tables == replayed[0].tables

    def test_one_shot_source_falls_back(self, sample_log_lines):
        """Test that a generator source is held in memory even when replay is requested."""
        source = (l for l in sample_log_lines)
        results = CombatLogPipeline(settings(hold_events=False)).run(source)

        assert len(results) == 1
        assert len(results[0].tables["damage"]) == 3

    def test_threads_match_sequential(self, sample_log_lines):
        """Test that running accumulators in threads changes nothing."""
        sequential = CombatLogPipeline(settings()).run(sample_log_lines)
        threaded = CombatLogPipeline(settings(max_workers=4)).run(sample_log_lines)

        assert sequential[0].tables == threaded[0].tables

    def test_repeat_runs(self, sample_log_lines):
        """Test that running the same pipeline twice is deterministic."""
        pipeline = CombatLogPipeline(settings())

        assert pipeline.run(sample_log_lines)[0].tables == pipeline.run(sample_log_lines)[0].tables


class TestConsumers:
    """Test result delivery."""

    def test_consumer_receives_results(self, sample_log_lines):
        """Test that the consumer sees every returned result."""
        consumer = RecordingConsumer()
        results = CombatLogPipeline(settings()).run(sample_log_lines, consumer)

        assert consumer.results == results

    def test_progress(self, sample_log_lines):
        """Test the progress callback."""
        calls = []
        CombatLogPipeline(settings()).run(sample_log_lines, progress_callback=lambda *a: calls.append(a))

        assert calls == [(1, 1)]

    def test_output_error_propagates(self, sample_log_lines):
        """Test that a failing consumer aborts the run."""
        with pytest.raises(OutputError) as exc_info:
            CombatLogPipeline(settings()).run(sample_log_lines, FailingConsumer())

        assert exc_info.value.encounter_key == ("Ragnaros", BASE_TIME + 10)

    def test_to_dict(self, sample_log_lines):
        """Test the serializable form of a result."""
        data = CombatLogPipeline(settings()).run(sample_log_lines)[0].to_dict()

        assert data["encounter"]["outcome"] == "kill"
        assert {actor["name"] for actor in data["actors"]} == {"Thrall", "Jaina", "Ragnaros"}
        assert data["tables"]["cast"]["key"] == ["actor", "spell", "target"]
        assert data["tables"]["death"]["rows"][0]["actor"] == RAGNAROS.id
