from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from airgradient_core.domain.errors import NoDataAvailable, UnsupportedCharacteristic
from airgradient_core.domain.models import UNAVAILABLE, DeviceVariant, Metric
from airgradient_core.domain.ports import SnapshotSource

MANUFACTURER = "AirGradient"


class Characteristic(str, Enum):
    AIR_QUALITY = "AirQuality"
    PM2_5_DENSITY = "PM2_5Density"
    PM10_DENSITY = "PM10Density"
    VOC_DENSITY = "VOCDensity"
    NITROGEN_DIOXIDE_DENSITY = "NitrogenDioxideDensity"
    CURRENT_TEMPERATURE = "CurrentTemperature"
    CARBON_DIOXIDE_DETECTED = "CarbonDioxideDetected"
    CARBON_DIOXIDE_LEVEL = "CarbonDioxideLevel"
    CURRENT_RELATIVE_HUMIDITY = "CurrentRelativeHumidity"


CHARACTERISTIC_METRICS: Dict[Characteristic, Metric] = {
    Characteristic.AIR_QUALITY: Metric.AIR_QUALITY,
    Characteristic.PM2_5_DENSITY: Metric.PM2_5,
    Characteristic.PM10_DENSITY: Metric.PM10,
    Characteristic.VOC_DENSITY: Metric.TVOC_INDEX,
    Characteristic.NITROGEN_DIOXIDE_DENSITY: Metric.NOX_INDEX,
    Characteristic.CURRENT_TEMPERATURE: Metric.TEMPERATURE,
    Characteristic.CARBON_DIOXIDE_DETECTED: Metric.CO2_DETECTED,
    Characteristic.CARBON_DIOXIDE_LEVEL: Metric.CO2,
    Characteristic.CURRENT_RELATIVE_HUMIDITY: Metric.RELATIVE_HUMIDITY,
}

CLOUD_CHARACTERISTICS: Tuple[Characteristic, ...] = (
    Characteristic.AIR_QUALITY,
    Characteristic.PM2_5_DENSITY,
    Characteristic.PM10_DENSITY,
    Characteristic.VOC_DENSITY,
    Characteristic.NITROGEN_DIOXIDE_DENSITY,
)

LOCAL_CHARACTERISTICS: Tuple[Characteristic, ...] = CLOUD_CHARACTERISTICS + (
    Characteristic.CURRENT_TEMPERATURE,
    Characteristic.CARBON_DIOXIDE_DETECTED,
    Characteristic.CARBON_DIOXIDE_LEVEL,
    Characteristic.CURRENT_RELATIVE_HUMIDITY,
)

Value = Union[int, float]


@dataclass(frozen=True)
class AccessoryInformation:
    manufacturer: str
    model: str
    serial_number: Optional[str]
    firmware_revision: Optional[str]


class PublicationSurface:
    """Synchronous getters over one poller's latest state."""

    def __init__(self, source: SnapshotSource, variant: DeviceVariant, device_key: str = ""):
        self._source = source
        self.variant = variant
        self.device_key = device_key

    @property
    def characteristics(self) -> Tuple[Characteristic, ...]:
        if self.variant is DeviceVariant.LOCAL:
            return LOCAL_CHARACTERISTICS
        return CLOUD_CHARACTERISTICS

    def get(self, characteristic: Union[Characteristic, str]) -> Value:
        """Return the current value, or raise NoDataAvailable. Never defaults to zero."""
        try:
            characteristic = Characteristic(characteristic)
        except ValueError as e:
            raise UnsupportedCharacteristic(f"Unknown characteristic {characteristic!r}") from e
        if characteristic not in self.characteristics:
            raise UnsupportedCharacteristic(
                f"{characteristic.value} is not exposed by {self.variant.value} devices"
            )

        value = self._source.current_value(CHARACTERISTIC_METRICS[characteristic])
        if value is UNAVAILABLE:
            raise NoDataAvailable(f"No {characteristic.value} data for {self.device_key or 'device'}")
        return value

    def values(self) -> Dict[str, Optional[Value]]:
        out: Dict[str, Optional[Value]] = {}
        for characteristic in self.characteristics:
            try:
                out[characteristic.value] = self.get(characteristic)
            except NoDataAvailable:
                out[characteristic.value] = None
        return out

    def information(self) -> AccessoryInformation:
        snapshot = self._source.snapshot
        telemetry = snapshot.telemetry if snapshot is not None else None
        serial = telemetry.serial_number if telemetry is not None else None
        if serial is None and self.variant is DeviceVariant.LOCAL:
            serial = self.device_key or None
        return AccessoryInformation(
            manufacturer=MANUFACTURER,
            model="AirGradient Local" if self.variant is DeviceVariant.LOCAL else "AirGradient Cloud",
            serial_number=serial,
            firmware_revision=telemetry.firmware_version if telemetry is not None else None,
        )

    # HomeKit-style getters

    def air_quality(self) -> Value:
        return self.get(Characteristic.AIR_QUALITY)

    def pm2_5_density(self) -> Value:
        return self.get(Characteristic.PM2_5_DENSITY)

    def pm10_density(self) -> Value:
        return self.get(Characteristic.PM10_DENSITY)

    def voc_density(self) -> Value:
        return self.get(Characteristic.VOC_DENSITY)

    def nitrogen_dioxide_density(self) -> Value:
        return self.get(Characteristic.NITROGEN_DIOXIDE_DENSITY)

    def current_temperature(self) -> Value:
        return self.get(Characteristic.CURRENT_TEMPERATURE)

    def carbon_dioxide_detected(self) -> Value:
        return self.get(Characteristic.CARBON_DIOXIDE_DETECTED)

    def carbon_dioxide_level(self) -> Value:
        return self.get(Characteristic.CARBON_DIOXIDE_LEVEL)

    def current_relative_humidity(self) -> Value:
        return self.get(Characteristic.CURRENT_RELATIVE_HUMIDITY)
