import logging

from fastapi import APIRouter, Depends

from app.api.v1.auth import require_admin
from app.api.v1.schemas import DeliverySettingsSchema
from app.application.ports.settings_store import SettingsStorePort
from app.wiring.dependencies import get_settings_store

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/settings/delivery", response_model=DeliverySettingsSchema)
def get_delivery(
    _: str = Depends(require_admin),
    store: SettingsStorePort = Depends(get_settings_store),
):
    return DeliverySettingsSchema.from_entity(store.get_delivery_settings())


@router.put("/settings/delivery", response_model=DeliverySettingsSchema)
def save_delivery(
    req: DeliverySettingsSchema,
    _: str = Depends(require_admin),
    store: SettingsStorePort = Depends(get_settings_store),
):
    saved = store.save_delivery_settings(req.to_entity())
    logger.info("Delivery settings saved", extra={"status": "complete" if saved.is_complete else "partial"})
    return DeliverySettingsSchema.from_entity(saved)
