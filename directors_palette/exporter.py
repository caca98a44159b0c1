"""Render shot lists as numbered, plain text, JSON or CSV exports."""

import csv
import io
import json
import logging
import re
import time
from datetime import datetime, timezone

from directors_palette.models import (
    ExportConfig,
    ExportResult,
    ShotChunk,
    ShotData,
    ShotMetadata,
)
from directors_palette.constants import (
    CSV_HEADERS,
    DEFAULT_ARTIST_TAG,
    EXPORT_FORMATS,
    FORMAT_EXTENSIONS,
)

logger = logging.getLogger(__name__)

# Original camelCase variable keys → placeholder names
VARIABLE_ALIASES = {
    "artistName": "artist",
    "artistDescription": "artist-desc",
    "artistTag": "artist-tag",
}


def create_artist_tag(name: str) -> str:
    """Turn a free-text name into an ``@slug`` reference tag.

    "Sarah Chen" → "@sarah-chen"
    "A$AP Rocky" → "@aap-rocky"
    "Jay-Z"      → "@jay-z"
    """
    slug = re.sub(r"[^a-z0-9\s-]", "", (name or "").lower())
    slug = re.sub(r"\s+", "-", slug.strip())
    slug = re.sub(r"-+", "-", slug).strip("-")
    return f"@{slug or DEFAULT_ARTIST_TAG}"


def normalize_variables(variables: dict | None) -> dict[str, str]:
    """Map alias keys onto placeholder names and drop empty values."""
    normalized = {}
    for key, value in (variables or {}).items():
        if not key or value is None or value == "":
            continue
        normalized[VARIABLE_ALIASES.get(key, key)] = str(value)
    return normalized


def replace_variables(text: str, variables: dict) -> str:
    """Substitute ``@name`` and ``{name}`` placeholders in one pass.

    Matching is case-insensitive and longest-name-first, so ``@artist-desc``
    is never read as ``@artist``. Placeholders with no (or an empty) value
    are left as they are.

    Substituted values are not scanned again, so a value that itself holds a
    known placeholder (an artist named "Director" tags as ``@director``)
    comes out verbatim and only expands on a second call.
    """
    values = {k.lower(): v for k, v in normalize_variables(variables).items()}
    if not text or not values:
        return text or ""

    names = "|".join(re.escape(name) for name in sorted(values, key=len, reverse=True))
    pattern = re.compile(rf"@({names})(?![\w-])|\{{({names})\}}", re.IGNORECASE)

    def _substitute(match: re.Match) -> str:
        name = match.group(1) if match.group(1) is not None else match.group(2)
        return values[name.lower()]

    return pattern.sub(_substitute, text)


def apply_prefix_suffix(description: str, prefix: str, suffix: str) -> str:
    return f"{prefix or ''}{description}{suffix or ''}"


def _shot_variables(shot: ShotData, variables: dict[str, str], config: ExportConfig) -> dict[str, str]:
    merged = dict(variables)
    if shot.chapter:
        merged["chapter"] = shot.chapter
    if shot.section:
        merged["section"] = shot.section
    if config.use_artist_descriptions and merged.get("artist-desc"):
        merged["artist"] = merged["artist-desc"]
    return merged


def _render_description(shot: ShotData, variables: dict[str, str], config: ExportConfig) -> str:
    merged = _shot_variables(shot, variables, config)
    return apply_prefix_suffix(
        replace_variables(shot.description or "", merged),
        replace_variables(config.prefix, merged),
        replace_variables(config.suffix, merged),
    )


def _json_entry(index: int, shot: ShotData, description: str, config: ExportConfig) -> dict:
    entry = {
        "id": shot.id,
        "shotNumber": index + 1,
        "description": description,
        "chapter": shot.chapter,
        "section": shot.section,
    }
    if config.include_metadata:
        entry["metadata"] = shot.metadata.to_dict() if shot.metadata else {}
    return entry


def _render_csv(shots: list[ShotData], descriptions: list[str]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for index, (shot, description) in enumerate(zip(shots, descriptions)):
        director_style = shot.metadata.director_style if shot.metadata else None
        writer.writerow([
            index + 1,
            description,
            shot.chapter or "",
            shot.section or "",
            director_style or "",
        ])
    return buffer.getvalue().rstrip("\n")


def format_shots(shots: list[ShotData], config: ExportConfig, variables: dict | None = None) -> str:
    """Render ``shots`` in input order according to ``config.format``."""
    if not shots:
        return ""

    fmt = config.format
    if fmt not in EXPORT_FORMATS:
        logger.warning("Unknown export format %r, exporting as text", fmt)
        fmt = "text"

    variables = normalize_variables(variables)
    if "artist" in variables and "artist-tag" not in variables:
        variables["artist-tag"] = create_artist_tag(variables["artist"])

    descriptions = [_render_description(shot, variables, config) for shot in shots]
    separator = config.separator if config.separator is not None else ""

    if fmt == "numbered":
        return separator.join(f"{i + 1}. {d}" for i, d in enumerate(descriptions))

    if fmt == "json":
        payload = {
            "shots": [
                _json_entry(i, shot, d, config)
                for i, (shot, d) in enumerate(zip(shots, descriptions))
            ],
            "totalShots": len(shots),
            "exportConfig": config.to_dict(),
            "exportedAt": datetime.now(timezone.utc).isoformat(),
        }
        return json.dumps(payload, indent=2, ensure_ascii=False)

    if fmt == "csv":
        return _render_csv(shots, descriptions)

    return separator.join(descriptions)


def process_shots_for_export(
    shots: list[ShotData],
    config: ExportConfig,
    variables: dict | None = None,
) -> ExportResult:
    """Format a shot list for export and time the work.

    Never raises on degenerate shots; empty ids or descriptions simply render
    as empty fields.
    """
    started = time.perf_counter()
    formatted = format_shots(shots, config, variables)
    elapsed_ms = (time.perf_counter() - started) * 1000

    logger.debug("Exported %d shots as %s in %.2f ms", len(shots), config.format, elapsed_ms)
    return ExportResult(
        formatted_text=formatted,
        total_shots=len(shots),
        processing_time=elapsed_ms,
        config=config,
    )


def shots_from_chunks(
    chunks: list[ShotChunk],
    chapter: str | None = None,
    metadata: ShotMetadata | None = None,
) -> list[ShotData]:
    """Seed a shot list from chunker output, one shot per chunk."""
    return [
        ShotData(
            id=chunk.id,
            description=chunk.text,
            chapter=chapter,
            shot_number=i + 1,
            metadata=metadata,
        )
        for i, chunk in enumerate(chunks)
    ]


def get_suggested_filename(
    config: ExportConfig,
    project_type: str,
    artist_name: str | None = None,
    now: datetime | None = None,
) -> str:
    """Timestamped export filename, e.g. ``story-shots-2024-01-15-20-00-00.txt``."""
    now = now or datetime.now()
    if artist_name:
        base = f"{project_type}-{create_artist_tag(artist_name).lstrip('@')}-shots"
    else:
        base = f"{project_type}-shots"
    extension = FORMAT_EXTENSIONS.get(config.format, "txt")
    return f"{base}-{now:%Y-%m-%d}-{now:%H-%M-%S}.{extension}"
