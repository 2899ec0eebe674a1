from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Optional, Sequence

from .base import Source
from ..domain.models import SystemState
from ..domain.numeric import parse_float, round_half_away, truncate
from ..drivers.commands import CommandError, run_command

logger = logging.getLogger(__name__)

Runner = Callable[[Sequence[str], float], str]


def parse_cpu_load(stat_text: str) -> Optional[float]:
    """Busy percentage from the aggregate 'cpu' line of /proc/stat."""
    line = stat_text.splitlines()[0] if stat_text else ""
    fields = line.split()
    if len(fields) < 8 or fields[0] != "cpu":
        return None
    try:
        user, nice, system, idle, iowait, irq, softirq = (int(f) for f in fields[1:8])
    except ValueError:
        return None
    total = user + nice + system + idle + iowait + irq + softirq
    if total == 0:
        return None
    return truncate(100 - (idle * 100) / total, 2)


def parse_measure_temp(text: str) -> Optional[float]:
    # temp=48.3'C
    _, sep, rest = text.strip().partition("=")
    if not sep:
        return None
    return parse_float(rest.split("'")[0])


def parse_pmic_adc(text: str) -> tuple[dict[str, float], dict[str, float]]:
    """Split `LABEL_A current(n)=0.1A` / `LABEL_V volt(n)=5.0V` lines by rail label."""
    currents: dict[str, float] = {}
    voltages: dict[str, float] = {}
    for line in text.splitlines():
        if not line.strip():
            continue
        left, sep, right = line.partition("=")
        tokens = left.split()
        if not sep or not tokens:
            logger.warning("Unexpected pmic_read_adc line: %r", line)
            continue
        label = tokens[0][:-2]
        right = right.strip()

        if right.endswith("A"):
            current = parse_float(right[:-1])
            if current is None:
                logger.warning("Failed to parse current value: %r", right)
                continue
            currents[label] = current
        elif right.endswith("V"):
            voltage = parse_float(right[:-1])
            if voltage is None:
                logger.warning("Failed to parse voltage value: %r", right)
                continue
            voltages[label] = voltage
    return currents, voltages


def compute_watts(currents: dict[str, float], voltages: dict[str, float]) -> Optional[float]:
    products = [c * voltages[label] for label, c in currents.items() if label in voltages]
    if not products:
        return None
    return truncate(sum(products), 2)


def find_fan_input(root: str) -> Optional[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        if "fan1_input" in filenames:
            return Path(dirpath) / "fan1_input"
    return None


class SystemStatsSource(Source):
    def __init__(
        self,
        proc_stat_path: str = "/proc/stat",
        cooling_fan_path: str = "/sys/devices/platform/cooling_fan",
        command_timeout_s: float = 5.0,
        runner: Runner = run_command,
    ) -> None:
        self._proc_stat_path = proc_stat_path
        self._cooling_fan_path = cooling_fan_path
        self._timeout = command_timeout_s
        self._run = runner
        self._fan_missing_logged = False

    @property
    def source_id(self) -> str:
        return "system"

    def empty(self) -> SystemState:
        return SystemState()

    def read(self) -> SystemState:
        return SystemState(
            watts=self._read_watts(),
            temperature=self._read_temperature(),
            fan=self._read_fan(),
            load=self._read_load(),
        )

    def _read_load(self) -> Optional[float]:
        try:
            text = Path(self._proc_stat_path).read_text()
        except OSError as e:
            logger.error("Failed to read system load: %s", e)
            return None
        load = parse_cpu_load(text)
        if load is None:
            logger.warning("Failed to parse system load from %s", self._proc_stat_path)
        return load

    def _read_temperature(self) -> Optional[float]:
        try:
            out = self._run(["vcgencmd", "measure_temp"], self._timeout)
        except CommandError as e:
            logger.error("Failed to read system temperature: %s", e)
            return None
        value = parse_measure_temp(out)
        if value is None:
            logger.warning("Failed to parse system temperature: %r", out.strip())
            return None
        return round_half_away(value, 2)

    def _read_fan(self) -> Optional[float]:
        path = find_fan_input(self._cooling_fan_path)
        if path is None:
            if not self._fan_missing_logged:
                logger.warning("No fan1_input found under %s", self._cooling_fan_path)
                self._fan_missing_logged = True
            return None
        try:
            text = path.read_text()
        except OSError as e:
            logger.error("Failed to read fan speed from %s: %s", path, e)
            return None
        rpm = parse_float(text)
        if rpm is None:
            logger.warning("Failed to parse fan speed: %r", text.strip())
        return rpm

    def _read_watts(self) -> Optional[float]:
        try:
            out = self._run(["vcgencmd", "pmic_read_adc"], self._timeout)
        except CommandError as e:
            logger.error("Failed to read system power consumption: %s", e)
            return None
        currents, voltages = parse_pmic_adc(out)
        return compute_watts(currents, voltages)
