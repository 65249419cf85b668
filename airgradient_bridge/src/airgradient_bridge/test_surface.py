from typing import Tuple

import pytest

from airgradient_core.domain.errors import NetworkError, NoDataAvailable, UnsupportedCharacteristic
from airgradient_core.domain.models import AirQuality, CarbonDioxideDetected, DeviceVariant

from airgradient_bridge.poller import DevicePoller
from airgradient_bridge.surface import (
    CLOUD_CHARACTERISTICS,
    LOCAL_CHARACTERISTICS,
    Characteristic,
    PublicationSurface,
)
from airgradient_bridge.utils.factories import CloudBodyFactory, LocalBodyFactory
from airgradient_bridge.utils.mocks import ScriptedClient


def make_surface(*steps, variant=DeviceVariant.LOCAL) -> Tuple[PublicationSurface, DevicePoller]:
    poller = DevicePoller("ABC123", "mock://", ScriptedClient(*steps), interval_s=60.0)
    return PublicationSurface(poller, variant, "ABC123"), poller


def test_getters_raise_no_data_before_first_success():
    surface, poller = make_surface(NetworkError("mock://", "down"))
    poller.poll_once()

    for characteristic in surface.characteristics:
        with pytest.raises(NoDataAvailable):
            surface.get(characteristic)
    assert set(surface.values().values()) == {None}


def test_local_getters():
    surface, poller = make_surface(LocalBodyFactory(rco2=950))
    poller.poll_once()

    assert surface.air_quality() == AirQuality.EXCELLENT
    assert surface.pm2_5_density() == 8
    assert surface.pm10_density() == 20
    assert surface.current_temperature() == 22.4
    assert surface.carbon_dioxide_level() == 950
    assert surface.carbon_dioxide_detected() == CarbonDioxideDetected.ABNORMAL
    assert surface.current_relative_humidity() == 41


def test_voc_and_nox_map_to_their_own_indices_not_pm10():
    # Earlier plugin variants answered VOCDensity and NitrogenDioxideDensity with pm10.
    surface, poller = make_surface(LocalBodyFactory(pm10=20, tvocIndex=50, noxIndex=5))
    poller.poll_once()

    assert surface.voc_density() == 50
    assert surface.nitrogen_dioxide_density() == 5
    assert surface.voc_density() != surface.pm10_density()
    assert surface.nitrogen_dioxide_density() != surface.pm10_density()


def test_cloud_variant_exposes_five_characteristics():
    surface, poller = make_surface(CloudBodyFactory(), variant=DeviceVariant.CLOUD)
    poller.poll_once()

    assert surface.characteristics == CLOUD_CHARACTERISTICS
    assert set(surface.values()) == {c.value for c in CLOUD_CHARACTERISTICS}
    with pytest.raises(UnsupportedCharacteristic):
        surface.current_temperature()


def test_local_variant_exposes_all_characteristics():
    surface, _ = make_surface(LocalBodyFactory())
    assert surface.characteristics == LOCAL_CHARACTERISTICS
    assert len(LOCAL_CHARACTERISTICS) == len(Characteristic)


def test_get_by_name():
    surface, poller = make_surface(LocalBodyFactory())
    poller.poll_once()

    assert surface.get("PM2_5Density") == 8
    with pytest.raises(UnsupportedCharacteristic):
        surface.get("Bogus")


def test_absent_field_is_unavailable_not_zero():
    surface, poller = make_surface(LocalBodyFactory(noxIndex=None))
    poller.poll_once()

    with pytest.raises(NoDataAvailable):
        surface.nitrogen_dioxide_density()
    assert surface.values()["NitrogenDioxideDensity"] is None
    assert surface.values()["PM10Density"] == 20


def test_information_from_latest_telemetry():
    surface, poller = make_surface(LocalBodyFactory(serialno="84fce6000001", firmwareVersion="3.1.9"))

    before = surface.information()
    assert before.manufacturer == "AirGradient"
    assert before.serial_number == "ABC123"
    assert before.firmware_revision is None

    poller.poll_once()
    after = surface.information()
    assert after.serial_number == "84fce6000001"
    assert after.firmware_revision == "3.1.9"
