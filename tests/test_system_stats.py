from __future__ import annotations

from pathlib import Path

from telemetry_node.domain.models import SystemState
from telemetry_node.drivers.commands import CommandError
from telemetry_node.sources.system_stats import (
    SystemStatsSource,
    compute_watts,
    find_fan_input,
    parse_cpu_load,
    parse_measure_temp,
    parse_pmic_adc,
)

from fakes import make_runner

PMIC_OUTPUT = """\
     3V7_WL_SW_A current(0)=0.10000000A
     3V3_SYS_A current(1)=0.05000000A
     3V7_WL_SW_V volt(8)=5.00000000V
     VDD_CORE_A current(7)=2.00000000A
     VDD_CORE_V volt(15)=0.50000000V
     EXT5V_V volt(24)=5.12000000V
"""


def test_watts_from_single_rail() -> None:
    assert compute_watts({"A0": 1.0}, {"A0": 5.0}) == 5.0


def test_watts_none_without_matching_rails() -> None:
    assert compute_watts({"A0": 1.0}, {"B0": 5.0}) is None


def test_parse_pmic_adc_pairs_rails_by_label() -> None:
    currents, voltages = parse_pmic_adc(PMIC_OUTPUT)

    assert currents == {"3V7_WL_SW": 0.1, "3V3_SYS": 0.05, "VDD_CORE": 2.0}
    assert voltages == {"3V7_WL_SW": 5.0, "VDD_CORE": 0.5, "EXT5V": 5.12}
    assert compute_watts(currents, voltages) == 1.5


def test_parse_pmic_adc_skips_malformed_values(caplog) -> None:
    currents, voltages = parse_pmic_adc("  BATT_V volt(3)=abcV\n garbage line\n")

    assert currents == {}
    assert voltages == {}
    assert "Failed to parse voltage value" in caplog.text


def test_cpu_load_is_truncated() -> None:
    assert parse_cpu_load("cpu  100 0 100 700 50 25 25 0 0 0\ncpu0 1 2 3 4 5 6 7\n") == 30.0
    # 66.666... would round to 66.67
    assert parse_cpu_load("cpu  1 0 1 1 0 0 0 0 0 0\n") == 66.66


def test_cpu_load_absent_on_bad_input() -> None:
    assert parse_cpu_load("") is None
    assert parse_cpu_load("intr 1 2 3") is None
    assert parse_cpu_load("cpu  0 0 0 0 0 0 0 0 0 0") is None


def test_parse_measure_temp() -> None:
    assert parse_measure_temp("temp=48.3'C\n") == 48.3
    assert parse_measure_temp("error") is None


def test_find_fan_input(tmp_path: Path) -> None:
    fan = tmp_path / "hwmon" / "hwmon3"
    fan.mkdir(parents=True)
    (fan / "fan1_input").write_text("2345\n")

    assert find_fan_input(str(tmp_path)) == fan / "fan1_input"
    assert find_fan_input(str(tmp_path / "missing")) is None


def _stat(tmp_path: Path) -> Path:
    path = tmp_path / "stat"
    path.write_text("cpu  100 0 100 700 50 25 25 0 0 0\n")
    return path


def test_read_all_fields(tmp_path: Path) -> None:
    fan_dir = tmp_path / "cooling_fan" / "hwmon" / "hwmon2"
    fan_dir.mkdir(parents=True)
    (fan_dir / "fan1_input").write_text("3120\n")
    runner = make_runner({
        ("vcgencmd", "measure_temp"): "temp=51.1'C\n",
        ("vcgencmd", "pmic_read_adc"): PMIC_OUTPUT,
    })
    source = SystemStatsSource(
        proc_stat_path=str(_stat(tmp_path)),
        cooling_fan_path=str(tmp_path / "cooling_fan"),
        runner=runner,
    )

    assert source.read() == SystemState(watts=1.5, temperature=51.1, fan=3120.0, load=30.0)


def test_failures_are_isolated_per_field(tmp_path: Path) -> None:
    runner = make_runner({
        ("vcgencmd", "measure_temp"): CommandError("vcgencmd: exit status 1"),
        ("vcgencmd", "pmic_read_adc"): PMIC_OUTPUT,
    })
    source = SystemStatsSource(
        proc_stat_path=str(_stat(tmp_path)),
        cooling_fan_path=str(tmp_path / "no_fan"),
        runner=runner,
    )

    state = source.read()

    assert state.temperature is None
    assert state.fan is None
    assert state.watts == 1.5
    assert state.load == 30.0


def test_everything_missing_is_all_absent(tmp_path: Path) -> None:
    source = SystemStatsSource(
        proc_stat_path=str(tmp_path / "nope"),
        cooling_fan_path=str(tmp_path / "nope"),
        runner=make_runner({}),
    )

    assert source.read() == SystemState()
    assert source.empty() == SystemState()


def test_watts_keep_last_digit_of_exact_products() -> None:
    assert compute_watts({"A0": 0.29}, {"A0": 1.0}) == 0.29
    assert compute_watts({"A0": 0.57}, {"A0": 1.0}) == 0.57
    assert compute_watts({"A0": 0.1, "B0": 0.2}, {"A0": 1.0, "B0": 1.0}) == 0.3
