# airgradient_bridge/api/schemas.py

from enum import IntEnum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

from airgradient_bridge.records import DeviceRecord


def plain(value):
    """Categories are IntEnums; expose them as their HomeKit integer."""
    return int(value) if isinstance(value, IntEnum) else value


class DeviceOut(BaseModel):
    token: str
    device_key: str
    name: str
    variant: str
    origin: str
    characteristics: List[str]

    @classmethod
    def from_record(cls, record: DeviceRecord) -> "DeviceOut":
        return cls(
            token=record.token,
            device_key=record.device_key,
            name=record.name,
            variant=record.variant.value,
            origin=record.origin.value,
            characteristics=[c.value for c in record.surface.characteristics],
        )


class AccessoryInformationOut(BaseModel):
    manufacturer: str
    model: str
    serial_number: Optional[str] = None
    firmware_revision: Optional[str] = None


class DeviceStateOut(DeviceOut):
    values: Dict[str, Optional[Union[int, float]]] = Field(
        ..., description="Characteristic values, null when no data is available"
    )
    information: AccessoryInformationOut
    last_success_ts: Optional[float] = None
    successes: int = 0
    failures: int = 0

    @classmethod
    def from_record(cls, record: DeviceRecord) -> "DeviceStateOut":
        info = record.surface.information()
        poller = record.poller
        return cls(
            **DeviceOut.from_record(record).model_dump(),
            values={k: plain(v) for k, v in record.surface.values().items()},
            information=AccessoryInformationOut(
                manufacturer=info.manufacturer,
                model=info.model,
                serial_number=info.serial_number,
                firmware_revision=info.firmware_revision,
            ),
            last_success_ts=poller.last_success_ts,
            successes=poller.successes,
            failures=poller.failures,
        )


class CharacteristicOut(BaseModel):
    token: str
    characteristic: str
    value: Union[int, float]
