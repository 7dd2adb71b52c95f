"""
Tests for persisted preferences, plan files and YAML timer settings.
"""

import json

import pytest

from hiit_timer.core.config_loader import TimerSettings, load_timer_settings, settings_from_dict
from hiit_timer.io.plan_loader import bundled_plan_names, load_plan, read_plan_document
from hiit_timer.io.preferences_store import DurationPreferencesStore, duration_options
from hiit_timer.io.serializers import (
    DurationPreferences,
    ValidationError,
    build_plan,
    plan_to_dict,
    validate_step_duration,
)


@pytest.fixture
def data_home(tmp_path, monkeypatch):
    """Point HIIT_TIMER_HOME at an empty temporary directory."""
    monkeypatch.setenv("HIIT_TIMER_HOME", str(tmp_path))
    return tmp_path


@pytest.fixture
def store(tmp_path):
    return DurationPreferencesStore(tmp_path / "preferences.json")


# ===========================================================================
# Duration preferences
# ===========================================================================


class TestDurationPreferences:

    def test_defaults_when_file_missing(self, store):
        prefs = store.load()
        assert (prefs.warmup_duration, prefs.cooldown_duration) == (20, 20)
        assert not store.path.exists()

    def test_save_and_reload(self, store):
        store.save(warmup_duration=45, cooldown_duration=60)
        prefs = store.load()
        assert (prefs.warmup_duration, prefs.cooldown_duration) == (45, 60)
        assert prefs.last_updated

    def test_partial_update_keeps_other_value(self, store):
        store.set_warmup_duration(30)
        store.set_cooldown_duration(90)
        prefs = store.load()
        assert (prefs.warmup_duration, prefs.cooldown_duration) == (30, 90)

    @pytest.mark.parametrize("value", [9, 301, 0, -20])
    def test_out_of_range_warmup_rejected(self, store, value):
        with pytest.raises(ValidationError, match="Warmup duration must be between 10-300 seconds"):
            store.set_warmup_duration(value)
        assert not store.path.exists()

    def test_out_of_range_cooldown_rejected(self, store):
        with pytest.raises(ValidationError, match="Cooldown duration"):
            store.set_cooldown_duration(500)

    @pytest.mark.parametrize("value", [10, 300])
    def test_bounds_are_inclusive(self, store, value):
        assert store.set_warmup_duration(value).warmup_duration == value

    def test_partial_file_merged_over_defaults(self, store):
        store.path.write_text(json.dumps({"cooldown_duration": 45}))
        prefs = store.load()
        assert (prefs.warmup_duration, prefs.cooldown_duration) == (20, 45)

    def test_corrupt_file_falls_back_to_defaults(self, store):
        store.path.write_text("{not json")
        assert store.load().warmup_duration == 20

    def test_file_without_durations_falls_back_to_defaults(self, store):
        store.path.write_text(json.dumps({"theme": "dark"}))
        assert store.load().cooldown_duration == 20

    def test_reset_to_defaults(self, store):
        store.save(warmup_duration=100)
        store.reset_to_defaults()
        assert not store.path.exists()
        assert store.load().warmup_duration == 20
        store.reset_to_defaults()

    def test_duration_options(self):
        options = duration_options()
        assert options[0] == 10
        assert options[-1] == 120
        assert len(options) == 23
        assert all(b - a == 5 for a, b in zip(options, options[1:]))

    def test_non_integer_rejected(self):
        with pytest.raises(ValidationError):
            validate_step_duration(12.5, "Warmup")
        with pytest.raises(ValidationError):
            validate_step_duration("30", "Warmup")


# ===========================================================================
# Plan documents
# ===========================================================================


DOC = {
    "name": "Tabata-ish",
    "warmup": ["arm_circles", {"id": "leg_swings", "duration": 30}],
    "exercises": [
        {"name": "Burpees", "work": 20, "rest": 10},
        {"work": 20, "rest": 10},
    ],
    "cooldown": [{"id": "childs_pose", "name": "Child's Pose"}],
}


class TestBuildPlan:

    def test_durations_from_preferences(self):
        plan = build_plan(DOC, DurationPreferences(warmup_duration=25, cooldown_duration=40))
        assert [s.duration_seconds for s in plan.warmup] == [25, 30]
        assert plan.cooldown[0].duration_seconds == 40
        assert plan.cooldown[0].name == "Child's Pose"
        assert plan.warmup[0].name == "Arm Circles"

    def test_main_steps(self):
        plan = build_plan(DOC)
        assert plan.name == "Tabata-ish"
        assert [(s.name, s.work_duration_seconds, s.rest_duration_seconds) for s in plan.main_steps] == [
            ("Burpees", 20, 10),
            ("Exercise 2", 20, 10),
        ]

    def test_exclude_warmup_and_cooldown(self):
        plan = build_plan(DOC, include_warmup=False, include_cooldown=False)
        assert plan.warmup == ()
        assert plan.cooldown == ()

    def test_missing_exercises_rejected(self):
        with pytest.raises(ValidationError, match="non-empty"):
            build_plan({"name": "Empty", "exercises": []})

    def test_missing_rest_rejected(self):
        with pytest.raises(ValidationError, match="missing fields"):
            build_plan({"exercises": [{"name": "Burpees", "work": 20}]})

    @pytest.mark.parametrize("work", [0, -1, "20", True])
    def test_bad_work_duration_rejected(self, work):
        with pytest.raises(ValidationError):
            build_plan({"exercises": [{"name": "Burpees", "work": work, "rest": 10}]})

    def test_bad_warmup_entry_rejected(self):
        with pytest.raises(ValidationError, match="warmup #1"):
            build_plan({"warmup": [{"name": "no id"}], "exercises": [{"work": 1, "rest": 1}]})

    def test_plan_to_dict_round_trip(self):
        plan = build_plan(DOC)
        assert build_plan(plan_to_dict(plan)) == plan


class TestPlanLoader:

    def test_bundled_quick_plan(self, data_home):
        assert "quick" in bundled_plan_names()
        plan = load_plan("quick", DurationPreferences(warmup_duration=15, cooldown_duration=30))
        assert plan.name == "Quick Bodyweight HIIT"
        assert len(plan.main_steps) == 6
        assert all(s.duration_seconds == 15 for s in plan.warmup)
        assert all(s.duration_seconds == 30 for s in plan.cooldown)

    def test_plan_file_path(self, tmp_path, data_home):
        path = tmp_path / "mine.yaml"
        path.write_text("name: Mine\nexercises:\n  - {name: Sprint, work: 15, rest: 45}\n")
        plan = load_plan(path)
        assert plan.name == "Mine"
        assert plan.warmup == ()
        assert plan.main_steps[0].rest_duration_seconds == 45

    def test_user_plan_by_name(self, data_home):
        (data_home / "plans").mkdir()
        (data_home / "plans" / "legs.yaml").write_text("exercises:\n  - {name: Lunges, work: 30, rest: 30}\n")
        assert load_plan("legs").main_steps[0].name == "Lunges"

    def test_unknown_plan_name(self, data_home):
        with pytest.raises(ValidationError, match="Unknown plan 'nope'"):
            read_plan_document("nope")

    def test_missing_plan_file(self, tmp_path):
        with pytest.raises(ValidationError, match="not found"):
            read_plan_document(tmp_path / "missing.yaml")

    def test_unparseable_plan(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("exercises: [unclosed\n")
        with pytest.raises(ValidationError, match="Cannot parse"):
            read_plan_document(path)

    def test_invalid_plan_names_source(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("exercises: []\n")
        with pytest.raises(ValidationError, match="Invalid plan"):
            load_plan(path)


# ===========================================================================
# Timer settings
# ===========================================================================


class TestTimerSettings:

    def test_bundled_defaults(self, data_home):
        settings = load_timer_settings()
        assert settings == TimerSettings()
        assert settings.prepare_seconds == 5
        assert settings.completion_delay_seconds == 2

    def test_user_override(self, data_home):
        (data_home / "timer.yaml").write_text(
            "timer:\n  prepare_seconds: 10\n  sound: false\nlogging:\n  level: debug\n"
        )
        settings = load_timer_settings()
        assert settings.prepare_seconds == 10
        assert settings.sound is False
        assert settings.log_level == "DEBUG"
        assert settings.completion_delay_seconds == 2

    def test_broken_user_file_ignored(self, data_home):
        (data_home / "timer.yaml").write_text("timer: [oops\n")
        assert load_timer_settings() == TimerSettings()

    def test_invalid_values_fall_back(self):
        settings = settings_from_dict(
            {
                "timer": {"prepare_seconds": "soon", "completion_delay_seconds": 0, "tick_interval_seconds": -1},
                "logging": {"level": "verbose"},
            }
        )
        assert settings.prepare_seconds == 5
        assert settings.completion_delay_seconds == 2
        assert settings.tick_interval_seconds == 1.0
        assert settings.log_level == "WARNING"

    @pytest.mark.parametrize("level, expected", [("verbose", "WARNING"), ("debug", "DEBUG"), ("Info", "INFO")])
    def test_log_level_validated(self, level, expected):
        assert settings_from_dict({"logging": {"level": level}}).log_level == expected
