import time
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Any, Mapping, Optional

DEFAULT_POLLING_INTERVAL_MS = 60000


class DeviceVariant(str, Enum):
    CLOUD = "cloud"  # location id + token, public cloud API
    LOCAL = "local"  # serial number, local network


class Metric(str, Enum):
    PM2_5 = "pm2_5"
    PM10 = "pm10"
    TVOC_INDEX = "tvoc_index"
    NOX_INDEX = "nox_index"
    TEMPERATURE = "temperature"
    CO2 = "co2"
    RELATIVE_HUMIDITY = "relative_humidity"
    # derived
    AIR_QUALITY = "air_quality"
    CO2_DETECTED = "co2_detected"


# Telemetry field each validated metric is read from.
METRIC_FIELDS: Mapping[Metric, str] = MappingProxyType(
    {
        Metric.PM2_5: "pm02",
        Metric.PM10: "pm10",
        Metric.TVOC_INDEX: "tvocIndex",
        Metric.NOX_INDEX: "noxIndex",
        Metric.TEMPERATURE: "atmp",
        Metric.CO2: "rco2",
        Metric.RELATIVE_HUMIDITY: "rhum",
    }
)

TRACKED_METRICS = tuple(METRIC_FIELDS)


class AirQuality(IntEnum):
    """HomeKit AirQuality characteristic values. UNKNOWN is never produced."""

    UNKNOWN = 0
    EXCELLENT = 1
    GOOD = 2
    FAIR = 3
    INFERIOR = 4
    POOR = 5


class CarbonDioxideDetected(IntEnum):
    NORMAL = 0
    ABNORMAL = 1


class _Unavailable(Enum):
    UNAVAILABLE = "unavailable"

    def __repr__(self) -> str:
        return "UNAVAILABLE"


UNAVAILABLE = _Unavailable.UNAVAILABLE


@dataclass(frozen=True)
class DeviceConfig:
    device_key: str
    variant: DeviceVariant
    polling_interval_ms: int = DEFAULT_POLLING_INTERVAL_MS
    token: Optional[str] = None
    hostname: Optional[str] = None
    name: Optional[str] = None

    @property
    def polling_interval_s(self) -> float:
        return self.polling_interval_ms / 1000.0


@dataclass(frozen=True)
class RawTelemetry:
    """Decoded body of one ``measures/current`` response."""

    fields: Mapping[str, Any]
    fetched_at: float = field(default_factory=time.time)

    def __post_init__(self):
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    @property
    def location_name(self) -> Optional[str]:
        value = self.fields.get("locationName")
        return value if isinstance(value, str) and value else None

    @property
    def serial_number(self) -> Optional[str]:
        value = self.fields.get("serialno")
        return str(value) if value not in (None, "") else None

    @property
    def firmware_version(self) -> Optional[str]:
        value = self.fields.get("firmwareVersion", self.fields.get("firmware"))
        return str(value) if value not in (None, "") else None

    @property
    def wifi(self) -> Optional[int]:
        value = self.fields.get("wifi")
        return value if isinstance(value, int) and not isinstance(value, bool) else None


@dataclass(frozen=True)
class FieldWarning:
    metric: Metric
    raw_value: Any
    reason: str

    def __str__(self) -> str:
        return f"{self.metric.value}: {self.reason} ({self.raw_value!r})"


@dataclass(frozen=True)
class ValidatedReading:
    pm2_5: Optional[float] = None
    pm10: Optional[float] = None
    tvoc_index: Optional[float] = None
    nox_index: Optional[float] = None
    temperature: Optional[float] = None
    co2: Optional[float] = None
    relative_humidity: Optional[float] = None

    def value(self, metric: Metric) -> Optional[float]:
        return getattr(self, metric.value)


@dataclass(frozen=True)
class ClassifiedState:
    reading: ValidatedReading
    air_quality: Optional[AirQuality]
    co2_detected: Optional[CarbonDioxideDetected]
    telemetry: Optional[RawTelemetry] = None

    def value(self, metric: Metric):
        if metric is Metric.AIR_QUALITY:
            return self.air_quality
        if metric is Metric.CO2_DETECTED:
            return self.co2_detected
        return self.reading.value(metric)
