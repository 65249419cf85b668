# airgradient_bridge/api/routes.py

from typing import List

from airgradient_core.domain.errors import NoDataAvailable, UnsupportedCharacteristic
from fastapi import APIRouter, Depends, HTTPException, Request

from airgradient_bridge.api.schemas import CharacteristicOut, DeviceOut, DeviceStateOut, plain
from airgradient_bridge.records import DeviceRecord
from airgradient_bridge.registry import DeviceRegistry

router = APIRouter()


def get_registry(request: Request) -> DeviceRegistry:
    return request.app.state.registry


def _record_or_404(token: str, registry: DeviceRegistry) -> DeviceRecord:
    record = registry.get(token)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Unknown device {token}")
    return record


@router.get("/ping")
def ping():
    return {"status": "ok"}


@router.get("/devices", response_model=List[DeviceOut])
def devices(registry: DeviceRegistry = Depends(get_registry)):
    return [DeviceOut.from_record(r) for r in registry.records()]


@router.get("/devices/{token}", response_model=DeviceStateOut)
def device_state(token: str, registry: DeviceRegistry = Depends(get_registry)):
    return DeviceStateOut.from_record(_record_or_404(token, registry))


@router.get("/devices/{token}/characteristics/{name}", response_model=CharacteristicOut)
def characteristic(token: str, name: str, registry: DeviceRegistry = Depends(get_registry)):
    record = _record_or_404(token, registry)
    try:
        value = record.surface.get(name)
    except UnsupportedCharacteristic as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except NoDataAvailable as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
    return CharacteristicOut(token=token, characteristic=name, value=plain(value))
