import logging
import threading
from typing import Callable, Dict, Iterable, List, Optional

from airgradient_core.domain.models import DeviceConfig, RawTelemetry
from airgradient_core.domain.ports import AccessoryHost

from airgradient_bridge.poller import DevicePoller
from airgradient_bridge.records import DeviceRecord, RecordOrigin, identity_token
from airgradient_bridge.surface import PublicationSurface

logger = logging.getLogger(__name__)

PollerFactory = Callable[[DeviceConfig, Callable[[RawTelemetry], None]], DevicePoller]


class DeviceRegistry:
    """Maps identity tokens to device records, one poller per token.

    Cached records may be pushed with ``configure_accessory`` at any time;
    they only get a poller once ``reconcile`` sees a config for their key.
    """

    def __init__(self, host: AccessoryHost, poller_factory: PollerFactory):
        self.host = host
        self._poller_factory = poller_factory
        self._cached: Dict[str, DeviceRecord] = {}
        self._records: Dict[str, DeviceRecord] = {}
        self._lock = threading.RLock()

    def configure_accessory(self, record: DeviceRecord) -> None:
        with self._lock:
            if record.token in self._records:
                logger.debug("Ignoring cached accessory %s, already bound", record.token)
                return
            record.origin = RecordOrigin.CACHED
            self._cached[record.token] = record
        logger.debug("Configured cached accessory %s (%s)", record.name, record.token)

    def reconcile(
        self, configs: Iterable[DeviceConfig], cached: Iterable[DeviceRecord] = ()
    ) -> List[DeviceRecord]:
        for record in cached:
            self.configure_accessory(record)

        results: List[DeviceRecord] = []
        seen = set()
        to_start: List[DevicePoller] = []

        try:
            with self._lock:
                for config in configs:
                    token = identity_token(config.device_key)
                    if token in seen:
                        logger.warning("Device %s is configured more than once", config.device_key)
                        continue
                    seen.add(token)

                    existing = self._records.get(token)
                    if existing is not None:
                        results.append(existing)
                        continue

                    cached = self._cached.get(token)
                    if cached is not None:
                        record = self._restore(config, cached)
                    else:
                        record = self._create(config, token)

                    to_start.append(record.poller)
                    results.append(record)

                for orphan in self._cached.values():
                    logger.info("Cached accessory %s has no configuration, leaving it idle", orphan.name)
        finally:
            # records bound before a failure still poll
            for poller in to_start:
                poller.start()

        logger.info(
            "Reconciled %d device(s): %d created, %d restored",
            len(results),
            sum(1 for r in results if r.origin is RecordOrigin.CREATED),
            sum(1 for r in results if r.origin is RecordOrigin.RESTORED),
        )
        return results

    def _restore(self, config: DeviceConfig, record: DeviceRecord) -> DeviceRecord:
        variant, display_name = record.variant, record.display_name
        record.variant = config.variant
        record.display_name = record.display_name or config.name
        record.origin = RecordOrigin.RESTORED
        try:
            self._bind(config, record)
            self.host.restore(record)
        except Exception:
            record.variant, record.display_name = variant, display_name
            record.origin = RecordOrigin.CACHED
            self._unbind(record)
            raise
        del self._cached[record.token]
        self._records[record.token] = record
        return record

    def _create(self, config: DeviceConfig, token: str) -> DeviceRecord:
        record = DeviceRecord(
            device_key=config.device_key,
            variant=config.variant,
            token=token,
            display_name=config.name,
            origin=RecordOrigin.CREATED,
        )
        try:
            self._bind(config, record)
            self.host.register_new(record)
        except Exception:
            self._unbind(record)
            raise
        self._records[record.token] = record
        return record

    def _bind(self, config: DeviceConfig, record: DeviceRecord) -> None:
        poller = self._poller_factory(config, lambda telemetry: self._on_telemetry(record, telemetry))
        record.poller = poller
        record.surface = PublicationSurface(poller, record.variant, record.device_key)

    @staticmethod
    def _unbind(record: DeviceRecord) -> None:
        record.poller = None
        record.surface = None

    def _on_telemetry(self, record: DeviceRecord, telemetry: RawTelemetry) -> None:
        name = telemetry.location_name
        with self._lock:
            if not name or name == record.display_name:
                return
            logger.info("Renaming %s to %r", record.device_key, name)
            record.display_name = name
        if record.poller is not None and record.poller.s_stop.is_set():
            logger.debug("Poller for %s is stopping, not updating cache", record.device_key)
            return
        self.host.update(record)

    def get(self, token: str) -> Optional[DeviceRecord]:
        with self._lock:
            return self._records.get(token)

    def records(self) -> List[DeviceRecord]:
        with self._lock:
            return list(self._records.values())

    def orphaned(self) -> List[DeviceRecord]:
        with self._lock:
            return list(self._cached.values())

    def __len__(self) -> int:
        return len(self._records)

    def shutdown(self, timeout: float = 5.0) -> None:
        records = self.records()
        for record in records:
            record.poller.stop()
        for record in records:
            if record.poller.is_alive():
                record.poller.join(timeout=timeout)
        logger.info("Stopped %d poller(s)", len(records))
