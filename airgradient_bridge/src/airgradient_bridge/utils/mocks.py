import json
import threading
from typing import Any, List, Optional, Union

import requests

from airgradient_core.domain.errors import FetchError, NetworkError
from airgradient_core.domain.models import RawTelemetry

from airgradient_bridge.records import DeviceRecord
from airgradient_bridge.telemetry_client import FetchResult

Step = Union[dict, FetchError, Exception]


class ScriptedClient:
    """Telemetry source that replays a script of bodies and errors.

    A dict step is returned as telemetry, a FetchError step as a failed fetch,
    and any other exception is raised from ``fetch``. The last step repeats
    once the script is exhausted.
    """

    def __init__(self, *steps: Step):
        self.steps: List[Step] = list(steps) or [NetworkError("mock://", "no script")]
        self.calls: List[str] = []
        self.fetched = threading.Event()
        self.closed = False

    def fetch(self, url: str) -> FetchResult:
        index = min(len(self.calls), len(self.steps) - 1)
        self.calls.append(url)
        step = self.steps[index]
        self.fetched.set()

        if isinstance(step, FetchError):
            return FetchResult.failure(step)
        if isinstance(step, Exception):
            raise step
        return FetchResult.success(RawTelemetry(step))

    def close(self) -> None:
        self.closed = True


class RecordingHost:
    """Accessory host that records every notification."""

    def __init__(self, cached: Optional[List[DeviceRecord]] = None):
        self._cached = list(cached or [])
        self.registered: List[DeviceRecord] = []
        self.restored: List[DeviceRecord] = []
        self.updated: List[DeviceRecord] = []

    def cached_records(self) -> List[DeviceRecord]:
        return list(self._cached)

    def register_new(self, record: DeviceRecord) -> None:
        self.registered.append(record)

    def restore(self, record: DeviceRecord) -> None:
        self.restored.append(record)

    def update(self, record: DeviceRecord) -> None:
        self.updated.append(record)


class FakeResponse:
    """Just enough of requests.Response for TelemetryClient."""

    def __init__(self, status_code: int = 200, body: Any = None, text: Optional[str] = None):
        self.status_code = status_code
        self._body = body
        self._text = text

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self) -> Any:
        if self._text is not None:
            return json.loads(self._text)
        return self._body
