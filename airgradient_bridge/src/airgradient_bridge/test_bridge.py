import json
from unittest.mock import Mock

from airgradient_core.config.environments import Settings
from airgradient_core.domain.models import AirQuality, DeviceVariant, Metric

from airgradient_bridge.accessory_cache import SQLiteAccessoryCache
from airgradient_bridge.bridge import bootstrap, make_poller_factory, shutdown
from airgradient_bridge.poller import DevicePoller
from airgradient_bridge.records import RecordOrigin
from airgradient_bridge.telemetry_client import TelemetryClient
from airgradient_bridge.utils.factories import CloudDeviceConfigFactory, DeviceConfigFactory, LocalBodyFactory
from airgradient_bridge.utils.mocks import ScriptedClient


def scripted_factory(*steps):
    clients = {}

    def factory(config, on_telemetry):
        client = clients[config.device_key] = ScriptedClient(*steps)
        return DevicePoller(config.device_key, "mock://", client, 60.0, on_telemetry=on_telemetry)

    factory.clients = clients
    return factory


def test_make_poller_factory_builds_endpoint_and_interval():
    settings = Settings(CLOUD_API_BASE="https://cloud.test/v1", LOCAL_HOST_PREFIX="ag", HTTP_TIMEOUT_SEC=4.0)
    factory = make_poller_factory(settings)

    cloud = factory(CloudDeviceConfigFactory(device_key="77", token="t", polling_interval_ms=1000), None)
    local = factory(DeviceConfigFactory(device_key="ABC123"), None)

    assert cloud.url == "https://cloud.test/v1/locations/77/measures/current?token=t"
    assert cloud.interval_s == 1.0
    assert isinstance(cloud.client, TelemetryClient)
    assert cloud.client.timeout == 4.0
    assert local.url == "http://ag_ABC123.local/measures/current"
    assert local.interval_s == 60.0


def test_bootstrap_restores_identities_across_restart(tmp_path):
    db = str(tmp_path / "accessories.db")
    devices = tmp_path / "devices.json"
    devices.write_text(json.dumps({"devices": [{"serialno": "ABC123", "name": "Office"}]}))
    settings = Settings(DEVICES_FILE=str(devices), ACCESSORY_CACHE_DB=db)

    factory = scripted_factory(LocalBodyFactory())
    registry = bootstrap(settings, poller_factory=factory)
    (first,) = registry.records()
    assert first.origin is RecordOrigin.CREATED
    assert factory.clients["ABC123"].fetched.wait(timeout=1.0)
    shutdown(registry)
    assert factory.clients["ABC123"].closed

    registry = bootstrap(settings, poller_factory=scripted_factory(LocalBodyFactory(pm02=60)))
    try:
        (second,) = registry.records()
        assert second.origin is RecordOrigin.RESTORED
        assert second.token == first.token
        assert second.display_name == "Office"
        assert second.variant is DeviceVariant.LOCAL
        second.poller.poll_once()
        assert second.poller.current_value(Metric.AIR_QUALITY) == AirQuality.FAIR
    finally:
        shutdown(registry)


def test_bootstrap_with_explicit_configs_and_cache():
    cache = SQLiteAccessoryCache.open(":memory:")
    registry = bootstrap(
        Settings(),
        configs=[DeviceConfigFactory(device_key="A"), DeviceConfigFactory(device_key="B")],
        cache=cache,
        poller_factory=scripted_factory(LocalBodyFactory()),
    )
    try:
        assert sorted(r.device_key for r in registry.records()) == ["A", "B"]
        assert sorted(r.device_key for r in cache.load()) == ["A", "B"]
    finally:
        shutdown(registry)


def test_shutdown_waits_for_pollers_before_closing_cache():
    registry = Mock()
    registry.records.return_value = []
    calls = []
    registry.shutdown.side_effect = lambda timeout: calls.append(("stop", timeout))
    registry.host.cache.close.side_effect = lambda: calls.append(("close", None))

    shutdown(registry, timeout=10.0)

    assert calls == [("stop", 10.0), ("close", None)]
