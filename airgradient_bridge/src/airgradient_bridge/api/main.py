from fastapi import FastAPI

from airgradient_bridge.api.routes import router
from airgradient_bridge.registry import DeviceRegistry


def create_app(registry: DeviceRegistry) -> FastAPI:
    app = FastAPI(title="AirGradient bridge")
    app.state.registry = registry
    app.include_router(router)
    return app
