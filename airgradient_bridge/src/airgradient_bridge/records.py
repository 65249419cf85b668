import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional

from airgradient_core.domain.models import DeviceVariant

if TYPE_CHECKING:
    from airgradient_bridge.poller import DevicePoller
    from airgradient_bridge.surface import PublicationSurface

# Fixed namespace: changing it would orphan every cached accessory.
IDENTITY_NAMESPACE = uuid.UUID("6f1c2b1e-8f5e-4a4e-9b0c-1a6d3e2f7c55")


def identity_token(device_key: str) -> str:
    return str(uuid.uuid5(IDENTITY_NAMESPACE, f"airgradient:{device_key}"))


class RecordOrigin(str, Enum):
    CACHED = "cached"  # known from the cache, not reconciled yet
    CREATED = "created"
    RESTORED = "restored"


@dataclass(eq=False)
class DeviceRecord:
    device_key: str
    variant: DeviceVariant
    token: str = ""
    display_name: Optional[str] = None
    origin: RecordOrigin = RecordOrigin.CACHED
    poller: Optional["DevicePoller"] = field(default=None, repr=False)
    surface: Optional["PublicationSurface"] = field(default=None, repr=False)

    def __post_init__(self):
        if not self.token:
            self.token = identity_token(self.device_key)

    @property
    def name(self) -> str:
        return self.display_name or f"AirGradient {self.device_key}"

    @property
    def bound(self) -> bool:
        return self.poller is not None
