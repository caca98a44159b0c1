"""Validation schemas for shot list and export settings files."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from directors_palette.models import ExportConfig, ShotData, ShotMetadata
from directors_palette.constants import DEFAULT_EXPORT_FORMAT, DEFAULT_SEPARATOR


class _WireModel(BaseModel):
    """Accepts both camelCase wire keys and snake_case field names."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ShotMetadataRecord(_WireModel):
    director_style: str | None = Field(default=None, alias="directorStyle")
    source_type: str | None = Field(default=None, alias="sourceType")
    timestamp: str | None = None

    def to_metadata(self) -> ShotMetadata:
        return ShotMetadata(
            director_style=self.director_style,
            source_type=self.source_type,
            timestamp=self.timestamp,
        )


class ShotRecord(_WireModel):
    """One shot as produced by the upstream generator."""
    id: str = ""
    description: str = ""
    chapter: str | None = None
    section: str | None = None
    shot_number: int = Field(default=0, alias="shotNumber")
    metadata: ShotMetadataRecord | None = None

    @field_validator("id", "description", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    def to_shot(self) -> ShotData:
        return ShotData(
            id=self.id,
            description=self.description,
            chapter=self.chapter,
            section=self.section,
            shot_number=self.shot_number,
            metadata=self.metadata.to_metadata() if self.metadata else None,
        )


class ExportSettings(_WireModel):
    """Contents of a project's export.json."""
    prefix: str = ""
    suffix: str = ""
    use_artist_descriptions: bool = Field(default=False, alias="useArtistDescriptions")
    format: Literal["text", "numbered", "json", "csv"] = DEFAULT_EXPORT_FORMAT
    separator: str = DEFAULT_SEPARATOR
    include_metadata: bool = Field(default=False, alias="includeMetadata")
    variables: dict[str, str] = Field(default_factory=dict)

    def to_config(self) -> ExportConfig:
        return ExportConfig(
            prefix=self.prefix,
            suffix=self.suffix,
            use_artist_descriptions=self.use_artist_descriptions,
            format=self.format,
            separator=self.separator,
            include_metadata=self.include_metadata,
        )

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)
