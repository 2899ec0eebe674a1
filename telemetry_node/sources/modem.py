from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Iterable, Optional, Sequence

from .base import Source
from ..domain.models import LocationFix, ModemReading, ModemState
from ..domain.numeric import parse_float, parse_int
from ..drivers.commands import CommandError, run_command

logger = logging.getLogger(__name__)

Runner = Callable[[Sequence[str], float], str]

_MODEM_PATH = re.compile(r"/Modem/(\d+)")


def discover_modem_id(listing: str, vendor: str) -> Optional[str]:
    """Pick the modem index from `mmcli -L` output."""
    for line in listing.splitlines():
        if vendor in line:
            m = _MODEM_PATH.search(line)
            if m:
                return m.group(1)
    return None


def _section(doc: Any, *keys: str) -> dict:
    node = doc
    for key in keys:
        if not isinstance(node, dict):
            return {}
        node = node.get(key)
    return node if isinstance(node, dict) else {}


def _tech_text(value: Any) -> Optional[str]:
    if isinstance(value, list):
        items = [str(v).strip() for v in value if str(v).strip()]
        return ",".join(items) or None
    if isinstance(value, str):
        value = value.strip()
        return value if value and value != "--" else None
    return None


def _sentence_type(sentence: str) -> Optional[str]:
    # $GPVTG -> VTG, $GNGGA -> GGA
    head = sentence.strip().split(",", 1)[0]
    if not head.startswith("$") or len(head) < 6:
        return None
    return head[3:]


def _find_sentence(nmea: Iterable[str], kind: str) -> Optional[list[str]]:
    for sentence in nmea:
        if isinstance(sentence, str) and _sentence_type(sentence) == kind:
            return sentence.strip().split(",")
    return None


def parse_speed(nmea: Iterable[str]) -> Optional[float]:
    """Ground speed in km/h from the VTG sentence."""
    parts = _find_sentence(nmea, "VTG")
    if parts is None or len(parts) <= 7:
        return None
    return parse_float(parts[7])


def parse_precision(nmea: Iterable[str]) -> tuple[Optional[int], Optional[float]]:
    """Satellite count and horizontal dilution from the GGA sentence."""
    parts = _find_sentence(nmea, "GGA")
    if parts is None or len(parts) <= 8:
        return None, None
    return parse_int(parts[7]), parse_float(parts[8])


def parse_modem_status(doc: Any) -> ModemState:
    generic = _section(doc, "modem", "generic")
    return ModemState(
        tech=_tech_text(generic.get("access-technologies")),
        signal=parse_int(_section(generic, "signal-quality").get("value")),
    )


def parse_location(doc: Any) -> LocationFix:
    gps = _section(doc, "modem", "location", "gps")
    nmea = gps.get("nmea")
    if isinstance(nmea, str):
        nmea = nmea.splitlines()
    elif not isinstance(nmea, list):
        nmea = []

    satellites, hdop = parse_precision(nmea)
    return LocationFix(
        longitude=parse_float(gps.get("longitude")),
        latitude=parse_float(gps.get("latitude")),
        altitude=parse_float(gps.get("altitude")),
        speed=parse_speed(nmea),
        satellites=satellites,
        hdop=hdop,
    )


class ModemSource(Source):
    """Cellular modem status and GPS fix via ModemManager's mmcli."""

    def __init__(
        self,
        vendor: str = "QUECTEL",
        command_timeout_s: float = 5.0,
        runner: Runner = run_command,
    ) -> None:
        self._vendor = vendor
        self._timeout = command_timeout_s
        self._run = runner
        self._modem_id: Optional[str] = None

    @property
    def source_id(self) -> str:
        return "modem"

    @property
    def modem_id(self) -> Optional[str]:
        return self._modem_id

    def empty(self) -> ModemReading:
        return ModemReading()

    def read(self) -> ModemReading:
        modem_id = self._ensure_modem()
        if modem_id is None:
            return ModemReading()

        status_doc = self._load_json(["mmcli", "-m", modem_id, "-J"], "modem data")
        location_doc = self._load_json(["mmcli", "-m", modem_id, "--location-get", "-J"], "location data")
        if status_doc is None and location_doc is None:
            # modem may have re-enumerated; look it up again next cycle
            self._modem_id = None

        return ModemReading(
            modem=parse_modem_status(status_doc),
            location=parse_location(location_doc),
        )

    def _ensure_modem(self) -> Optional[str]:
        if self._modem_id is not None:
            return self._modem_id

        try:
            listing = self._run(["mmcli", "-L"], self._timeout)
        except CommandError as e:
            logger.warning("Failed to list modems: %s", e)
            return None

        modem_id = discover_modem_id(listing, self._vendor)
        if modem_id is None:
            logger.warning("No %s modem found", self._vendor)
            return None
        logger.debug("Modem ID: %s", modem_id)

        try:
            self._run(
                ["mmcli", "-m", modem_id, "--location-enable-gps-raw", "--location-enable-gps-nmea"],
                self._timeout,
            )
        except CommandError as e:
            logger.error("Failed to enable GPS: %s", e)

        self._modem_id = modem_id
        return modem_id

    def _load_json(self, args: list[str], what: str) -> Optional[dict]:
        try:
            out = self._run(args, self._timeout)
        except CommandError as e:
            logger.error("Failed to read %s: %s", what, e)
            return None
        try:
            doc = json.loads(out)
        except ValueError as e:
            logger.warning("Error parsing %s: %s", what, e)
            return None
        if not isinstance(doc, dict):
            logger.warning("Error parsing %s: unexpected JSON %s", what, type(doc).__name__)
            return None
        return doc
