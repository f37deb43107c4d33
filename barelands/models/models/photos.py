import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class PhotoCategory(str, Enum):
    MOUNTAINS = "Mountains"
    DESERTS = "Deserts"
    FORESTS = "Forests"
    OCEANS = "Oceans"
    NIGHT_SKY = "Night Sky"
    ITALY = "Italy"
    TRAVEL = "Travel"


# Filter-only pseudo-category, never stored on a record
ALL_CATEGORIES = "All"


def photo_categories() -> list[str]:
    """Selectable categories, ``All`` first."""
    return [ALL_CATEGORIES] + [category.value for category in PhotoCategory]


def utc_timestamp() -> str:
    """Current time as an ISO-8601 string with millisecond precision and a ``Z`` suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class PhotoRecord(BaseModel):
    """One entry of the catalog, persisted with camelCase keys."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), min_length=1)
    title: str = Field(min_length=1)
    category: PhotoCategory
    image: str = Field(min_length=1)
    description: str = ""
    location: str = ""
    featured: bool = False
    date_added: str = Field(default_factory=utc_timestamp, alias="dateAdded")

    model_config = ConfigDict(populate_by_name=True, extra="ignore", use_enum_values=True)

    @field_validator("title", "image", mode="before")
    @classmethod
    def strip_required_text(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("date_added")
    @classmethod
    def validate_date_added(cls, v: str) -> str:
        try:
            parse_timestamp(v)
        except ValueError:
            raise ValueError(f"dateAdded must be an ISO-8601 timestamp, got {v!r}")
        return v

    @property
    def added_at(self) -> datetime:
        return parse_timestamp(self.date_added)

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


# Fields an update may replace; id and dateAdded are immutable
MUTABLE_FIELDS = ("title", "category", "image", "description", "location", "featured")


class PhotoUpdateRequest(BaseModel):
    id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    category: PhotoCategory
    image: str | None = Field(default=None, min_length=1)
    description: str | None = None
    location: str | None = None
    featured: bool | None = None

    model_config = ConfigDict(extra="ignore", use_enum_values=True)

    @field_validator("title", "image", mode="before")
    @classmethod
    def strip_text(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    def changes(self) -> dict:
        """Mutable fields present in the request."""
        return {
            field: getattr(self, field)
            for field in MUTABLE_FIELDS
            if getattr(self, field) is not None
        }


class PhotoUploadRequest(BaseModel):
    """Metadata of an upload; ``image`` is a data URI, an external URL or absent for multipart files."""

    title: str = Field(min_length=1)
    category: PhotoCategory
    image: str | None = None
    description: str = ""
    location: str = ""
    featured: bool = False

    model_config = ConfigDict(extra="ignore", use_enum_values=True)

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("description", "location", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else v


class PhotoIdRequest(BaseModel):
    id: str = Field(min_length=1, validation_alias=AliasChoices("id", "photoId"))

    model_config = ConfigDict(extra="ignore")


class PhotoFeatureRequest(PhotoIdRequest):
    """Toggles the flag unless ``featured`` is given explicitly."""

    featured: bool | None = None
