"""
Registration config endpoints — admin-editable sign-up and help links.

Singleton pattern: one document in app_config. GET retrieves it, PUT updates
it. If no document exists, one is created with defaults on first GET.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.v1.deps import AdminContext, get_current_admin, get_store
from app.db.store import RecordStore
from app.models.registration_config import RegistrationConfig
from app.schemas.registration import RegistrationConfigRead, RegistrationConfigUpdate
from app.services.registration import get_registration_config, update_registration_config

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/registration", response_model=RegistrationConfigRead)
async def read_registration_config(
    store: RecordStore = Depends(get_store),
    _admin: AdminContext = Depends(get_current_admin),
) -> RegistrationConfig:
    """Get the current registration / WhatsApp help links."""
    return await get_registration_config(store)


@router.put("/registration", response_model=RegistrationConfigRead)
async def write_registration_config(
    body: RegistrationConfigUpdate,
    store: RecordStore = Depends(get_store),
    admin: AdminContext = Depends(get_current_admin),
) -> RegistrationConfig:
    """Update the registration links, description or active flag."""
    return await update_registration_config(
        store, body.model_dump(exclude_unset=True), updated_by=admin.email
    )
