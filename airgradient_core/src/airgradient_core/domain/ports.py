from typing import TYPE_CHECKING, Iterable, List, Optional, Protocol

from airgradient_core.domain.models import ClassifiedState, Metric, RawTelemetry

if TYPE_CHECKING:
    from airgradient_core.domain.errors import FetchError


class FetchResult(Protocol):
    telemetry: Optional[RawTelemetry]
    error: Optional["FetchError"]

    @property
    def ok(self) -> bool: ...


class TelemetrySource(Protocol):
    def fetch(self, url: str) -> FetchResult: ...


class SnapshotSource(Protocol):
    """Read side of a poller, as seen by the publication surface."""

    @property
    def snapshot(self) -> Optional[ClassifiedState]: ...

    def current_value(self, metric: Metric): ...


class AccessoryHost(Protocol):
    """The accessory platform the bridge reports devices to.

    ``cached_records`` is read once at startup; the three notifications may be
    called from any thread.
    """

    def cached_records(self) -> Iterable: ...

    def register_new(self, record) -> None: ...

    def restore(self, record) -> None: ...

    def update(self, record) -> None: ...


class AccessoryCacheStore(Protocol):
    def load(self) -> List: ...

    def save(self, record) -> None: ...

    def remove(self, token: str) -> None: ...
