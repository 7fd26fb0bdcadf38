from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ReviewStatus = Literal["pending", "approved", "rejected"]
REVIEW_STATUSES: tuple[str, ...] = ("pending", "approved", "rejected")

ABOUT_DOC_ID = "about-data"
CONTACT_DOC_ID = "contact-data"
SETTINGS_DOC_ID = "main"


# ---- media ----


class Video(BaseModel):
    id: str
    title: str
    description: str
    year: int
    video_url: str
    thumbnail_url: str
    duration: str
    category: str
    isPublished: bool = True
    order: int = 0
    createdAt: str | None = None
    updatedAt: str | None = None


class Photo(BaseModel):
    id: str
    title: str
    description: str
    year: int
    image_url: str
    thumbnail_url: str
    category: str
    location: str
    isPublished: bool = True
    order: int = 0
    createdAt: str | None = None
    updatedAt: str | None = None


class _MediaCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    year: int
    thumbnail_url: str = Field(min_length=1)
    category: str = Field(min_length=1)
    isPublished: bool = True
    order: int = 0


class VideoCreate(_MediaCreate):
    video_url: str = Field(min_length=1)
    duration: str = Field(min_length=1)


class PhotoCreate(_MediaCreate):
    image_url: str = Field(min_length=1)
    location: str = Field(min_length=1)


class _MediaUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    id: str | None = None
    title: str | None = None
    description: str | None = None
    year: int | None = None
    thumbnail_url: str | None = None
    category: str | None = None
    isPublished: bool | None = None
    order: int | None = None


class VideoUpdate(_MediaUpdate):
    video_url: str | None = None
    duration: str | None = None


class PhotoUpdate(_MediaUpdate):
    image_url: str | None = None
    location: str | None = None


# ---- reviews ----


class Review(BaseModel):
    id: str
    name: str
    profession: str
    photo_url: str | None = None
    review_text: str
    rating: int | None = Field(default=None, ge=1, le=5)
    status: ReviewStatus = "pending"
    created_at: str | None = None
    updated_at: str | None = None


class ReviewSubmit(BaseModel):
    """Public submission body. Field rules are checked by the reviews service."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    profession: str | None = None
    photo_url: str | None = None
    review_text: str | None = None
    rating: int | float | str | None = None


class ReviewUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    name: str | None = None
    profession: str | None = None
    photo_url: str | None = None
    review_text: str | None = None
    rating: int | None = Field(default=None, ge=1, le=5)
    status: str | None = None


class ReviewBulkAction(BaseModel):
    action: str | None = None
    ids: list[str] | None = None


# ---- site content ----


class Profile(BaseModel):
    name: str
    title: str
    bio: str
    photo_url: str = ""
    experience_years: int
    location: str


class SkillGroup(BaseModel):
    category: str
    items: list[str] = Field(default_factory=list)


class Software(BaseModel):
    name: str
    level: int = Field(ge=0, le=100)
    icon: str


class Achievement(BaseModel):
    year: int
    title: str
    event: str


class AboutData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    profile: Profile | None = None
    skills: list[SkillGroup] | None = None
    software: list[Software] | None = None
    achievements: list[Achievement] | None = None


class ContactInfo(BaseModel):
    email: str
    phone: str = ""
    location: str = ""


class SocialLink(BaseModel):
    name: str
    url: str
    icon: str = ""


class Availability(BaseModel):
    status: str
    message: str = ""


class ContactData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    contact: ContactInfo | None = None
    social: list[SocialLink] | None = None
    availability: Availability | None = None


class SiteSettings(BaseModel):
    lightWaveEffect: bool = True
    reviewsEnabled: bool = True


class SiteSettingsUpdate(BaseModel):
    # Type checks happen in the service so non-boolean values get a 400.
    lightWaveEffect: object | None = None
    reviewsEnabled: object | None = None


# ---- projects ----


class Project(BaseModel):
    id: int
    title: str
    description: str
    video: str | None = None
    images: list[str] = Field(default_factory=list)
    url: str | None = None
    createdAt: str | None = None
    updatedAt: str | None = None


class ProjectCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    description: str | None = None
    video: str | None = None
    images: list[str] | None = None
    url: str | None = None


class ProjectUpdate(ProjectCreate):
    id: int | None = None


# ---- admin ----


class AdminUser(BaseModel):
    email: str
    passwordHash: str
    name: str | None = None
    role: Literal["admin"] = "admin"
    createdAt: str | None = None
    updatedAt: str | None = None


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class SeedRequest(BaseModel):
    secret: str | None = None
