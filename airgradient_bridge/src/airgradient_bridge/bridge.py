import logging
import signal
import sys
from typing import List, Optional

from airgradient_core.config.devices import load_device_configs
from airgradient_core.config.environments import Settings, get_settings
from airgradient_core.domain.models import DeviceConfig

from .accessory_cache import SQLiteAccessoryCache
from .host import LocalAccessoryHost
from .poller import DevicePoller
from .registry import DeviceRegistry, PollerFactory
from .telemetry_client import TelemetryClient, endpoint_for, redact

log = logging.getLogger(__name__)


def make_poller_factory(settings: Settings) -> PollerFactory:
    """Each poller gets its own client: requests sessions are not shared across threads."""

    def factory(config: DeviceConfig, on_telemetry) -> DevicePoller:
        url = endpoint_for(
            config,
            cloud_base=settings.CLOUD_API_BASE,
            local_prefix=settings.LOCAL_HOST_PREFIX,
        )
        log.debug("Device %s polls %s", config.device_key, redact(url))
        return DevicePoller(
            device_key=config.device_key,
            url=url,
            client=TelemetryClient(timeout=settings.HTTP_TIMEOUT_SEC),
            interval_s=config.polling_interval_s,
            on_telemetry=on_telemetry,
        )

    return factory


def bootstrap(
    settings: Settings,
    configs: Optional[List[DeviceConfig]] = None,
    cache: Optional[SQLiteAccessoryCache] = None,
    poller_factory: Optional[PollerFactory] = None,
) -> DeviceRegistry:
    if configs is None:
        configs = load_device_configs(settings.DEVICES_FILE, settings.DEFAULT_POLLING_INTERVAL_MS)
    if cache is None:
        cache = SQLiteAccessoryCache.open(settings.ACCESSORY_CACHE_DB)

    log.info(f"Starting bridge in {settings.ENVIRONMENT.value} environment")
    log.info(f"Accessory cache: {settings.ACCESSORY_CACHE_DB}")
    log.info(f"Devices: {len(configs)}")

    host = LocalAccessoryHost(cache)
    registry = DeviceRegistry(host, poller_factory or make_poller_factory(settings))
    for record in host.cached_records():
        registry.configure_accessory(record)

    registry.reconcile(configs)
    return registry


def shutdown(registry: DeviceRegistry, timeout: float = 5.0) -> None:
    """Stops pollers before closing what their callbacks write to.

    ``timeout`` should cover one in-flight request.
    """
    registry.shutdown(timeout=timeout)
    for record in registry.records():
        close = getattr(record.poller.client, "close", None)
        if close is not None:
            close()
    cache = getattr(registry.host, "cache", None)
    if cache is not None:
        cache.close()


def serve(registry: DeviceRegistry, settings: Settings) -> None:
    import uvicorn

    from .api.main import create_app

    log.info(f"Serving API on {settings.API_HOST}:{settings.API_PORT}")
    try:
        uvicorn.run(
            create_app(registry),
            host=settings.API_HOST,
            port=settings.API_PORT,
            log_level=settings.LOG_LEVEL.lower(),
        )
    finally:
        shutdown(registry, timeout=settings.HTTP_TIMEOUT_SEC)


def run_headless(registry: DeviceRegistry, settings: Settings) -> None:
    def sigterm_handler(signum, frame):
        log.info("Received shutdown signal, stopping pollers...")
        shutdown(registry, timeout=settings.HTTP_TIMEOUT_SEC)
        sys.exit(0)

    signal.signal(signal.SIGTERM, sigterm_handler)
    signal.signal(signal.SIGINT, sigterm_handler)
    signal.pause()


def main(devices_file: Optional[str] = None, with_api: bool = True) -> None:
    settings = get_settings()
    if devices_file:
        settings.DEVICES_FILE = devices_file

    registry = bootstrap(settings)
    if with_api:
        serve(registry, settings)
    else:
        run_headless(registry, settings)
