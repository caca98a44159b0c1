"""Data models for shot chunking and export."""

from dataclasses import dataclass, field
from typing import Literal

from directors_palette.constants import (
    CONTENT_PRESETS,
    DEFAULT_EXPORT_FORMAT,
    DEFAULT_MAX_WORDS_PER_SHOT,
    DEFAULT_MIN_WORDS_PER_SHOT,
    DEFAULT_SEPARATOR,
)

BoundaryType = Literal["sentence", "paragraph", "dialogue", "scene_change", "time_transition"]
ParsingMode = Literal["punctuation", "lines", "hybrid"]
ContentType = Literal["story", "lyrics", "children_book", "commercial"]
ExportFormat = Literal["text", "numbered", "json", "csv"]


@dataclass
class TextBoundary:
    position: int        # offset of a whitespace char in the trimmed text
    score: int           # 0-10, higher is a better cut
    type: BoundaryType
    reason: str          # diagnostic only

    def to_dict(self) -> dict:
        return {
            "position": self.position,
            "score": self.score,
            "type": self.type,
            "reason": self.reason,
        }


@dataclass
class ShotChunk:
    id: str              # "shot_1", "shot_2", ...
    text: str
    start_pos: int       # [start_pos, end_pos) in the trimmed text
    end_pos: int
    boundary_score: int

    @property
    def word_count(self) -> int:
        return len(self.text.split())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "startPos": self.start_pos,
            "endPos": self.end_pos,
            "boundaryScore": self.boundary_score,
        }


@dataclass
class ChunkingOptions:
    target_shot_count: int
    min_words_per_shot: int = DEFAULT_MIN_WORDS_PER_SHOT
    max_words_per_shot: int = DEFAULT_MAX_WORDS_PER_SHOT
    prefer_natural_breaks: bool = True
    content_type: ContentType | None = None
    parsing_mode: ParsingMode | None = None

    @classmethod
    def for_content(cls, content_type: str, target_shot_count: int, **overrides) -> "ChunkingOptions":
        """Build options from a content preset; unknown types get plain defaults."""
        values = dict(CONTENT_PRESETS.get(content_type, {}))
        values.update(overrides)
        return cls(target_shot_count=target_shot_count, content_type=content_type, **values)

    def to_dict(self) -> dict:
        return {
            "targetShotCount": self.target_shot_count,
            "minWordsPerShot": self.min_words_per_shot,
            "maxWordsPerShot": self.max_words_per_shot,
            "preferNaturalBreaks": self.prefer_natural_breaks,
            "contentType": self.content_type,
            "parsingMode": self.parsing_mode,
        }


@dataclass
class ShotSuggestion:
    count: int
    reason: str
    confidence: int      # 0-10


@dataclass
class ShotMetadata:
    director_style: str | None = None
    source_type: str | None = None      # "story" or "music-video"
    timestamp: str | None = None

    def to_dict(self) -> dict:
        data = {
            "directorStyle": self.director_style,
            "sourceType": self.source_type,
            "timestamp": self.timestamp,
        }
        return {k: v for k, v in data.items() if v is not None}


@dataclass
class ShotData:
    id: str
    description: str
    chapter: str | None = None
    section: str | None = None
    shot_number: int = 0
    metadata: ShotMetadata | None = None


@dataclass
class ExportConfig:
    prefix: str = ""
    suffix: str = ""
    use_artist_descriptions: bool = False
    format: ExportFormat = DEFAULT_EXPORT_FORMAT
    separator: str = DEFAULT_SEPARATOR
    include_metadata: bool = False

    def to_dict(self) -> dict:
        return {
            "prefix": self.prefix,
            "suffix": self.suffix,
            "useArtistDescriptions": self.use_artist_descriptions,
            "format": self.format,
            "separator": self.separator,
            "includeMetadata": self.include_metadata,
        }


@dataclass
class ExportResult:
    formatted_text: str
    total_shots: int
    processing_time: float   # ms, diagnostic only
    config: ExportConfig = field(default_factory=ExportConfig)
