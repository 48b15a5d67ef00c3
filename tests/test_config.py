import json

from reactorsim.config import DEFAULT_CONFIG, SimulationConfig, load_config, save_config
from reactorsim.simulation import Reactor


def test_defaults():
    assert DEFAULT_CONFIG.fuel_ticks == 10000
    assert DEFAULT_CONFIG.timeout_ticks == 50000
    assert DEFAULT_CONFIG.min_cycle_ticks == 1000


def test_reached_min_cycle_uses_integer_percent():
    assert not DEFAULT_CONFIG.reached_min_cycle(999)
    assert DEFAULT_CONFIG.reached_min_cycle(1000)


def test_missing_file_gives_defaults(tmp_path):
    assert load_config(tmp_path / "nope.json") is DEFAULT_CONFIG
    assert load_config(None) is DEFAULT_CONFIG


def test_round_trip(tmp_path):
    path = tmp_path / "sim.json"
    config = SimulationConfig(fuel_ticks=200, timeout_ticks=1000)
    save_config(config, path)
    assert load_config(path) == config


def test_unknown_keys_are_ignored(tmp_path, caplog):
    path = tmp_path / "sim.json"
    path.write_text(json.dumps({"fuel_ticks": 300, "warp": 9}), encoding="utf-8")
    assert load_config(path) == SimulationConfig(fuel_ticks=300)
    assert "warp" in caplog.text


def test_malformed_json_gives_defaults(tmp_path):
    path = tmp_path / "sim.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_config(path) is DEFAULT_CONFIG


def test_bad_value_gives_defaults(tmp_path):
    path = tmp_path / "sim.json"
    path.write_text(json.dumps({"fuel_ticks": "lots"}), encoding="utf-8")
    assert load_config(path) is DEFAULT_CONFIG


def test_config_follows_reactor_copies():
    config = SimulationConfig(base_max_heat=500)
    reactor = Reactor(config=config)
    assert reactor.max_heat == 500
    assert reactor.copy().config is config
