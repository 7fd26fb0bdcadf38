from __future__ import annotations

from fastapi import APIRouter

from ..models import AboutData, ContactData, SiteSettingsUpdate
from ..services import public_cache, site_content_repo

about_router = APIRouter(tags=["admin-about"])
contact_router = APIRouter(tags=["admin-contact"])
settings_router = APIRouter(tags=["admin-settings"])


@about_router.get("")
def get_about():
    return {"about": site_content_repo.get_about()}


@about_router.post("")
@about_router.put("")
def save_about(body: AboutData):
    return {"about": site_content_repo.save_about(body.model_dump(exclude_unset=True))}


@contact_router.get("")
def get_contact():
    return {"contact": site_content_repo.get_contact()}


@contact_router.post("")
@contact_router.put("")
def save_contact(body: ContactData):
    return {"contact": site_content_repo.save_contact(body.model_dump(exclude_unset=True))}


@settings_router.get("")
def get_settings():
    return {"settings": site_content_repo.get_settings()}


@settings_router.put("")
def update_settings(body: SiteSettingsUpdate):
    updated = site_content_repo.update_settings(body.model_dump(exclude_unset=True))
    # reviewsEnabled is cached by the public reviews endpoint.
    public_cache.invalidate(public_cache.REVIEWS_PREFIX)
    return {"settings": updated}
