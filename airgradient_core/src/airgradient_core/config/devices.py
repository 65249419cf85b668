# airgradient_core/config/devices.py

import json
import logging
import os
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from airgradient_core.domain.errors import DeviceConfigError
from airgradient_core.domain.models import DEFAULT_POLLING_INTERVAL_MS, DeviceConfig, DeviceVariant

logger = logging.getLogger(__name__)


class DeviceEntry(BaseModel):
    """One entry of the ``devices`` list, using the plugin's config keys."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: Optional[str] = None
    location_id: Optional[Union[int, str]] = Field(None, alias="locationId")
    api_token: Optional[str] = Field(None, alias="apiToken")
    serial_number: Optional[str] = Field(None, alias="serialno")
    hostname: Optional[str] = None
    polling_interval: Optional[int] = Field(None, alias="pollingInterval", gt=0)

    @model_validator(mode="after")
    def _exactly_one_key(self) -> "DeviceEntry":
        if (self.location_id is None) == (self.serial_number is None):
            raise ValueError("exactly one of locationId or serialno is required")
        if self.location_id is not None and not self.api_token:
            raise ValueError("apiToken is required with locationId")
        return self

    def to_domain(self, default_interval_ms: int) -> DeviceConfig:
        if self.location_id is not None:
            return DeviceConfig(
                device_key=str(self.location_id),
                variant=DeviceVariant.CLOUD,
                polling_interval_ms=self.polling_interval or default_interval_ms,
                token=self.api_token,
                name=self.name,
            )
        return DeviceConfig(
            device_key=str(self.serial_number),
            variant=DeviceVariant.LOCAL,
            polling_interval_ms=self.polling_interval or default_interval_ms,
            hostname=self.hostname,
            name=self.name,
        )


class DevicesFile(BaseModel):
    devices: List[DeviceEntry] = Field(default_factory=list)


def parse_device_configs(
    data, default_interval_ms: int = DEFAULT_POLLING_INTERVAL_MS
) -> List[DeviceConfig]:
    try:
        parsed = DevicesFile.model_validate(data)
    except ValidationError as e:
        raise DeviceConfigError(f"Invalid device configuration: {e}") from e
    return [entry.to_domain(default_interval_ms) for entry in parsed.devices]


def load_device_configs(
    path: str, default_interval_ms: int = DEFAULT_POLLING_INTERVAL_MS
) -> List[DeviceConfig]:
    """
    Expected JSON structure:

    {
      "devices": [
        {"name": "Office", "locationId": "12345", "apiToken": "...", "pollingInterval": 60000},
        {"name": "Bedroom", "serialno": "84fce6123456"},
        {"serialno": "84fce6abcdef", "hostname": "192.168.1.40"}
      ]
    }
    """
    if not os.path.exists(path):
        logger.warning("No device configuration found at %s", path)
        return []

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise DeviceConfigError(f"{path} is not valid JSON: {e}") from e

    configs = parse_device_configs(data, default_interval_ms)
    logger.info("Loaded %d device(s) from %s", len(configs), path)
    return configs
