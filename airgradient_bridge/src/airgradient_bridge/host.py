import logging
from typing import Dict, List

from airgradient_core.domain.ports import AccessoryCacheStore

from airgradient_bridge.records import DeviceRecord

logger = logging.getLogger(__name__)


class LocalAccessoryHost:
    """Standalone accessory host backed by an accessory cache.

    Keeps the set of published accessories in memory and writes identities
    through to the cache so the next start can restore them.
    """

    def __init__(self, cache: AccessoryCacheStore):
        self.cache = cache
        self.published: Dict[str, DeviceRecord] = {}

    def cached_records(self) -> List[DeviceRecord]:
        return self.cache.load()

    def register_new(self, record: DeviceRecord) -> None:
        logger.info("Registering new accessory %s (%s)", record.name, record.token)
        self.cache.save(record)
        self.published[record.token] = record

    def restore(self, record: DeviceRecord) -> None:
        logger.info("Restoring accessory %s from cache", record.name)
        self.cache.save(record)
        self.published[record.token] = record

    def update(self, record: DeviceRecord) -> None:
        logger.debug("Updating cached accessory %s", record.token)
        self.cache.save(record)
