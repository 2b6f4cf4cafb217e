"""Reusable FastAPI dependencies."""

from fastapi import Depends, Request

from webar.core.container import ApplicationContainer
from webar.modules.assets import AssetService
from webar.modules.delivery import AssetDelivery, VariantResolver


def get_container(request: Request) -> ApplicationContainer:
    return request.app.state.container


def get_asset_service(container: ApplicationContainer = Depends(get_container)) -> AssetService:
    return container.assets


def get_delivery(container: ApplicationContainer = Depends(get_container)) -> AssetDelivery:
    return container.delivery


def get_resolver(container: ApplicationContainer = Depends(get_container)) -> VariantResolver:
    return container.resolver


__all__ = [
    "get_asset_service",
    "get_container",
    "get_delivery",
    "get_resolver",
]
