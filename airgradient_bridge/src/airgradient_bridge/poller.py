import logging
import threading
import time
from enum import Enum
from typing import Callable, Optional

from airgradient_core.domain.classifier import classify
from airgradient_core.domain.errors import FetchError
from airgradient_core.domain.models import UNAVAILABLE, ClassifiedState, Metric, RawTelemetry
from airgradient_core.domain.ports import TelemetrySource
from airgradient_core.domain.validator import validate

logger = logging.getLogger(__name__)


class PollerPhase(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    PUBLISHING = "publishing"
    RETAINING = "retaining"
    STOPPED = "stopped"


class DevicePoller(threading.Thread):
    """Polls one device and holds its last classified state.

    The first fetch happens as soon as the thread starts. After every cycle,
    whatever its outcome, the thread waits ``interval_s`` before the next one,
    so cycles never overlap and a failure never halts polling. A failed fetch
    leaves the previous state in place; a successful one replaces it whole.
    """

    daemon = True

    def __init__(
        self,
        device_key: str,
        url: str,
        client: TelemetrySource,
        interval_s: float,
        on_telemetry: Optional[Callable[[RawTelemetry], None]] = None,
        name: Optional[str] = None,
    ):
        super().__init__(name=name or f"poller-{device_key}")
        self.device_key = device_key
        self.url = url
        self.client = client
        self.interval_s = interval_s
        self.on_telemetry = on_telemetry
        self.s_stop = threading.Event()

        self._cycle_lock = threading.Lock()
        self._state: Optional[ClassifiedState] = None
        self._phase = PollerPhase.IDLE
        self.last_outcome: Optional[PollerPhase] = None
        self.last_error: Optional[FetchError] = None
        self.last_success_ts: Optional[float] = None
        self.successes = 0
        self.failures = 0

    @property
    def phase(self) -> PollerPhase:
        return self._phase

    @property
    def snapshot(self) -> Optional[ClassifiedState]:
        return self._state

    @property
    def has_data(self) -> bool:
        return self._state is not None

    def current_value(self, metric: Metric):
        """Latest value for ``metric``, or UNAVAILABLE.

        Values stay available after later polls fail; there is no expiry.
        """
        state = self._state
        if state is None:
            return UNAVAILABLE
        value = state.value(metric)
        return UNAVAILABLE if value is None else value

    def stop(self) -> None:
        self.s_stop.set()
        if not self.is_alive():
            self._phase = PollerPhase.STOPPED

    def poll_once(self) -> bool:
        """Run one fetch/validate/classify cycle. Returns True if state was replaced."""
        with self._cycle_lock:
            try:
                return self._cycle()
            finally:
                self._phase = PollerPhase.IDLE

    def _cycle(self) -> bool:
        self._phase = PollerPhase.FETCHING
        result = self.client.fetch(self.url)

        if not result.ok:
            self.failures += 1
            self.last_error = result.error
            self._phase = self.last_outcome = PollerPhase.RETAINING
            logger.error(
                "Error fetching data for %s, keeping previous values: %s",
                self.device_key,
                result.error,
            )
            return False

        telemetry = result.telemetry
        reading, warnings = validate(telemetry)
        for warning in warnings:
            if warning.reason == "missing":
                logger.debug("%s did not report %s", self.device_key, warning.metric.value)
            else:
                logger.warning("%s sent an invalid reading: %s", self.device_key, warning)

        self._state = classify(reading, telemetry)
        self.successes += 1
        self.last_success_ts = time.time()
        self._phase = self.last_outcome = PollerPhase.PUBLISHING
        logger.debug("Published new state for %s: %s", self.device_key, self._state.reading)

        if self.on_telemetry is not None:
            self.on_telemetry(telemetry)
        return True

    def run(self) -> None:
        logger.info("Poller started for %s every %.1fs", self.device_key, self.interval_s)
        while not self.s_stop.is_set():
            try:
                self.poll_once()
            except Exception:
                logger.exception("Unexpected error while polling %s", self.device_key)
            finally:
                # rearm on every exit path
                self.s_stop.wait(self.interval_s)
        self._phase = PollerPhase.STOPPED
        logger.info("Poller stopped for %s", self.device_key)
