"""Schema for the remote ``site.json`` manifest.

Only ``metadata`` and ``items`` are required.  Everything below them is
optional, and a value of the wrong JSON type is treated as absent instead of
failing the load: defaulting happens later in the normalizer and presenter.
"""

from typing import Annotated, Any, List, Optional

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)


def _bool_is_absent(value: Any) -> Any:
    # JSON true/false would otherwise coerce to 1.0/0.0
    return None if isinstance(value, bool) else value


Number = Annotated[Optional[float], BeforeValidator(_bool_is_absent)]


class _LenientModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _mapping_or_empty(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}

    @field_validator("*", mode="wrap")
    @classmethod
    def _absent_when_invalid(cls, value: Any, handler: Any) -> Any:
        try:
            return handler(value)
        except ValidationError:
            return None


class SiteInfo(_LenientModel):
    name: Optional[str] = None
    description: Optional[str] = None
    logo: Optional[str] = None
    created: Number = None
    updated: Number = None


class ThemeVariables(_LenientModel):
    hex_code: Optional[str] = Field(default=None, alias="hexCode")
    icon: Optional[str] = None


class Theme(_LenientModel):
    name: Optional[str] = None
    variables: ThemeVariables = Field(default_factory=ThemeVariables)


class ManifestMetadata(_LenientModel):
    site: SiteInfo = Field(default_factory=SiteInfo)
    theme: Theme = Field(default_factory=Theme)


class ItemMetadata(_LenientModel):
    images: Optional[List[Any]] = None
    image: Optional[str] = None
    updated: Number = None
    readtime: Number = None
    videos: Optional[List[Any]] = None


class ContentItem(_LenientModel):
    """One content page as listed in the manifest."""

    title: Optional[str] = None
    description: Optional[str] = None
    slug: Optional[str] = None
    location: Optional[str] = None
    metadata: ItemMetadata = Field(default_factory=ItemMetadata)


class ManifestDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    metadata: ManifestMetadata
    items: List[ContentItem]

    @model_validator(mode="before")
    @classmethod
    def _require_top_level_keys(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            raise ValueError("Invalid site.json schema.")
        if value.get("metadata") is None or value.get("items") is None:
            raise ValueError("Invalid site.json schema.")
        return value

    @field_validator("items", mode="before")
    @classmethod
    def _items_as_list(cls, value: Any) -> Any:
        return value if isinstance(value, list) else []
