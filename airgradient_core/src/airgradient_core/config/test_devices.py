import json

import pytest

from airgradient_core.config.devices import load_device_configs, parse_device_configs
from airgradient_core.domain.errors import DeviceConfigError
from airgradient_core.domain.models import DeviceVariant


def test_parse_cloud_and_local_entries():
    configs = parse_device_configs(
        {
            "devices": [
                {"name": "Office", "locationId": 12345, "apiToken": "tok", "pollingInterval": 30000},
                {"name": "Bedroom", "serialno": "84fce6123456"},
                {"serialno": "84fce6abcdef", "hostname": "192.168.1.40"},
            ]
        },
        default_interval_ms=60000,
    )

    office, bedroom, hall = configs
    assert office.device_key == "12345"
    assert office.variant is DeviceVariant.CLOUD
    assert office.token == "tok"
    assert office.polling_interval_ms == 30000
    assert bedroom.variant is DeviceVariant.LOCAL
    assert bedroom.polling_interval_ms == 60000
    assert bedroom.polling_interval_s == 60.0
    assert hall.hostname == "192.168.1.40"
    assert hall.name is None


@pytest.mark.parametrize(
    "entry",
    [
        {"name": "nothing"},
        {"locationId": "1", "serialno": "abc", "apiToken": "t"},
        {"locationId": "1"},
        {"serialno": "abc", "pollingInterval": 0},
    ],
)
def test_parse_rejects_invalid_entries(entry):
    with pytest.raises(DeviceConfigError):
        parse_device_configs({"devices": [entry]})


def test_load_missing_file_returns_empty(tmp_path):
    assert load_device_configs(str(tmp_path / "missing.json")) == []


def test_load_from_file(tmp_path):
    path = tmp_path / "devices.json"
    path.write_text(json.dumps({"devices": [{"serialno": "ABC123", "pollingInterval": 1000}]}))

    (config,) = load_device_configs(str(path))
    assert config.device_key == "ABC123"
    assert config.polling_interval_ms == 1000


def test_load_rejects_malformed_json(tmp_path):
    path = tmp_path / "devices.json"
    path.write_text("{not json")
    with pytest.raises(DeviceConfigError):
        load_device_configs(str(path))
