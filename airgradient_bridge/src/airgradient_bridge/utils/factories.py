from datetime import datetime, timezone

import factory
from airgradient_core.domain.models import DeviceConfig, DeviceVariant, RawTelemetry


class UTCFloatTimestamp(factory.Factory):
    class Meta:
        model = float

    @classmethod
    def _create(cls, *_, **__):
        return datetime.now(tz=timezone.utc).timestamp()


class LocalBodyFactory(factory.DictFactory):
    """A ``measures/current`` body as served by a device on the local network."""

    serialno = factory.Sequence(lambda n: f"84fce6{n:06x}")
    wifi = -52
    pm01 = 3
    pm02 = 8
    pm10 = 20
    pm003Count = 512
    atmp = 22.4
    rhum = 41
    rco2 = 612
    tvocIndex = 50
    noxIndex = 5
    firmwareVersion = "3.1.1"


class CloudBodyFactory(LocalBodyFactory):
    """The cloud API adds location fields to the same measures."""

    locationId = factory.Sequence(lambda n: 1000 + n)
    locationName = factory.Sequence(lambda n: f"Room {n}")


class RawTelemetryFactory(factory.Factory):
    class Meta:
        model = RawTelemetry

    fields = factory.SubFactory(LocalBodyFactory)
    fetched_at = UTCFloatTimestamp()


class DeviceConfigFactory(factory.Factory):
    class Meta:
        model = DeviceConfig

    device_key = factory.Sequence(lambda n: f"84fce6{n:06x}")
    variant = DeviceVariant.LOCAL
    polling_interval_ms = 60000
    token = None
    hostname = None
    name = None


class CloudDeviceConfigFactory(DeviceConfigFactory):
    device_key = factory.Sequence(lambda n: str(1000 + n))
    variant = DeviceVariant.CLOUD
    token = "secret-token"
