"""
Unit Tests for the run store
"""

import json

import pytest

from constants import NamedConstant
from dimreal import DimensionedValue
from errors import SaveDirError
from run_store import RunStore, make_seed_string


class TestSeedString:

    def test_seed_string_when_builtins_and_user_constants_then_canonical(self, config_factory, dv, pi_constant):
        g = NamedConstant("g", dv("9.80665 m/s^2"))
        config = config_factory(max_expr_size=2, max_int_constants=4)
        seed = make_seed_string([pi_constant, g], dv("3 s"), config)
        settings, target, constants = seed.split(";")
        assert settings == "max_expr=2,max_int=4,digits=15,guard=10,top=30,simplify=1,prune=0"
        assert target == "target=3 s"
        assert constants.startswith("pi,%1=9.8066")
        assert constants.endswith(" m/s^2")

    def test_seed_string_when_bounds_differ_then_differs(self, config_factory, dv, pi_constant):
        target = dv("1")
        assert make_seed_string([pi_constant], target, config_factory(max_int_constants=2)) != \
               make_seed_string([pi_constant], target, config_factory(max_int_constants=3))

    def test_seed_string_when_targets_agree_to_displayed_digits_then_differs(self, config_factory, ctx, pi_constant):
        config = config_factory(digits=3)
        close = [DimensionedValue.parse(text, ctx) for text in ("6.2832", "6.2811")]
        assert close[0].format(3) == close[1].format(3)
        assert make_seed_string([pi_constant], close[0], config) != \
               make_seed_string([pi_constant], close[1], config)

    def test_seed_string_when_user_constants_agree_to_displayed_digits_then_differs(self, config_factory, dv):
        config = config_factory(digits=3)
        a = NamedConstant("k", dv("1.0001"))
        b = NamedConstant("k", dv("1.0002"))
        assert make_seed_string([a], dv("1"), config) != make_seed_string([b], dv("1"), config)


class TestRunStore:

    SEED = "max_expr=1,max_int=2,digits=15;target=6.2832;pi"

    def test_init_when_directory_missing_then_created(self, tmp_path):
        RunStore(tmp_path / "a" / "b")
        assert (tmp_path / "a" / "b").is_dir()

    def test_init_when_path_is_a_file_then_raises(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        with pytest.raises(SaveDirError) as info:
            RunStore(blocker / "runs")
        assert info.value.exit_code == 5

    def test_mark_started_when_called_then_not_completed(self, tmp_path):
        store = RunStore(tmp_path)
        store.mark_started(self.SEED)
        assert store.path_for(self.SEED).exists()
        assert not store.is_completed(self.SEED)
        assert store.load_results(self.SEED) is None

    def test_mark_completed_when_called_then_results_reloaded(self, tmp_path):
        store = RunStore(tmp_path)
        store.mark_started(self.SEED)
        ranked = [("(pi * 2)", "1.46928204135e-5"), ("(pi + 3)", "0.141592653589793")]
        store.mark_completed(self.SEED, ranked, 0.25)

        assert store.is_completed(self.SEED)
        assert RunStore(tmp_path).load_results(self.SEED) == ranked
        assert not list(tmp_path.glob("*.tmp"))

    def test_load_results_when_file_corrupt_then_none(self, tmp_path):
        store = RunStore(tmp_path)
        store.path_for(self.SEED).write_text("{not json")
        assert store.load_results(self.SEED) is None

    def test_load_results_when_seed_differs_then_none(self, tmp_path):
        store = RunStore(tmp_path)
        store.path_for(self.SEED).write_text(json.dumps({
            "seed": "something else", "completed": True, "results": [],
        }))
        assert store.load_results(self.SEED) is None

    def test_key_when_same_seed_then_stable(self):
        assert RunStore.key(self.SEED) == RunStore.key(self.SEED)
        assert len(RunStore.key(self.SEED)) == 16
