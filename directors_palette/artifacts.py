"""Project directories, JSON artifacts, shot list loading and export files."""

import json
import logging
import os
import re
import shutil

from pydantic import ValidationError

from directors_palette.constants import OUTPUT_DIR
from directors_palette.models import ExportResult, ShotData
from directors_palette.schemas import ExportSettings, ShotRecord

logger = logging.getLogger(__name__)

CHUNKS_FILE = "chunks.json"
SHOTS_FILE = "shots.json"
EXPORT_SETTINGS_FILE = "export.json"
EXPORTS_DIR = "exports"

# Invalidation map: setting key → list of subdirs to clear
INVALIDATION_MAP = {
    "shots": [EXPORTS_DIR],
    "mode": [EXPORTS_DIR],
    "prefix": [EXPORTS_DIR],
    "suffix": [EXPORTS_DIR],
    "format": [EXPORTS_DIR],
    "separator": [EXPORTS_DIR],
    "metadata": [EXPORTS_DIR],
    "artist-descriptions": [EXPORTS_DIR],
    "var": [EXPORTS_DIR],
}


def slug_from_path(source_path: str) -> str:
    """Convert a source filename to a project slug.

    "Neon Nights.txt" → "neon_nights"
    "/path/to/The Heist (draft).md" → "the_heist_draft"
    """
    basename = os.path.splitext(os.path.basename(source_path))[0]
    return re.sub(r"[^a-zA-Z0-9]+", "_", basename).strip("_").lower()


def init_output_dir(source_path: str, output_base: str = OUTPUT_DIR) -> str:
    """Create output/<slug>/ with its exports/ subdirectory.

    Returns the project directory path.
    """
    project_dir = os.path.join(output_base, slug_from_path(source_path))
    os.makedirs(os.path.join(project_dir, EXPORTS_DIR), exist_ok=True)
    return project_dir


def write_artifact(project_dir: str, filename: str, data) -> str:
    """Write a JSON artifact and return its path."""
    path = os.path.join(project_dir, filename)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    return path


def load_artifact(project_dir: str, filename: str):
    """Read a JSON artifact. Returns None if missing or malformed."""
    path = os.path.join(project_dir, filename)
    if not os.path.exists(path):
        return None
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError:
        logger.warning("Malformed artifact: %s", path)
        return None


def load_variables(source_path: str) -> dict[str, str]:
    """Load the <source>.vars.json placeholder sidecar if there is one.

    Returns an empty dict when the sidecar is missing or malformed.
    """
    vars_path = os.path.splitext(source_path)[0] + ".vars.json"
    if not os.path.exists(vars_path):
        return {}
    try:
        with open(vars_path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError:
        logger.warning("Malformed variables file: %s, ignoring it", vars_path)
        return {}
    if not isinstance(data, dict):
        logger.warning("Variables file %s is not a JSON object, ignoring it", vars_path)
        return {}
    return {str(k): str(v) for k, v in data.items() if k and v is not None}


def parse_shots(data) -> list[ShotData]:
    """Validate shot entries from a bare list or a {"shots": [...]} object.

    Entries that fail validation are skipped with a warning.
    """
    entries = data.get("shots", []) if isinstance(data, dict) else data
    if not isinstance(entries, list):
        logger.warning("Shot list is not a JSON array, ignoring it")
        return []

    shots = []
    for index, entry in enumerate(entries):
        try:
            shots.append(ShotRecord.model_validate(entry).to_shot())
        except ValidationError as e:
            logger.warning("Skipping invalid shot #%d: %s", index + 1, e.errors()[0]["msg"])
    return shots


def load_shots(path: str) -> list[ShotData]:
    """Read a shot list file. Missing or malformed files give an empty list."""
    if not os.path.exists(path):
        logger.warning("Shot list not found: %s", path)
        return []
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError:
        logger.warning("Malformed shot list: %s", path)
        return []
    return parse_shots(data)


def shots_to_records(shots: list[ShotData]) -> list[dict]:
    """Serialise shots into shots.json entries."""
    records = []
    for shot in shots:
        record = {
            "id": shot.id,
            "description": shot.description,
            "shotNumber": shot.shot_number,
        }
        if shot.chapter:
            record["chapter"] = shot.chapter
        if shot.section:
            record["section"] = shot.section
        if shot.metadata:
            record["metadata"] = shot.metadata.to_dict()
        records.append(record)
    return records


def load_export_settings(project_dir: str) -> ExportSettings:
    """Read export.json, falling back to defaults when missing or invalid."""
    data = load_artifact(project_dir, EXPORT_SETTINGS_FILE)
    if not data:
        return ExportSettings()
    try:
        return ExportSettings.model_validate(data)
    except ValidationError as e:
        logger.warning("Invalid %s in %s, using defaults: %s", EXPORT_SETTINGS_FILE, project_dir, e)
        return ExportSettings()


def write_export(project_dir: str, result: ExportResult, filename: str) -> str:
    """Write a rendered export under exports/ and return its path."""
    exports_dir = os.path.join(project_dir, EXPORTS_DIR)
    os.makedirs(exports_dir, exist_ok=True)
    path = os.path.join(exports_dir, filename)
    with open(path, "w", encoding="utf-8") as f:
        f.write(result.formatted_text)
    return path


def invalidate_downstream(project_dir: str, setting_key: str) -> list[str]:
    """Clear downstream subdirectories for a given setting change.

    Returns list of cleared subdirectory names.
    """
    cleared = []
    for subdir in INVALIDATION_MAP.get(setting_key, []):
        path = os.path.join(project_dir, subdir)
        if os.path.exists(path) and os.listdir(path):
            shutil.rmtree(path)
            os.makedirs(path, exist_ok=True)
            cleared.append(subdir)
    return cleared


def get_project_status(project_dir: str) -> dict:
    """Return dict describing current state of each pipeline step."""
    status = {}

    chunks = load_artifact(project_dir, CHUNKS_FILE)
    if isinstance(chunks, dict) and chunks:
        status["chunk"] = {"state": "done", "chunks": len(chunks.get("chunks", []))}
    else:
        status["chunk"] = {"state": "pending"}

    shots_path = os.path.join(project_dir, SHOTS_FILE)
    if os.path.exists(shots_path):
        status["shots"] = {"state": "done", "shots": len(load_shots(shots_path))}
    else:
        status["shots"] = {"state": "pending"}

    exports_dir = os.path.join(project_dir, EXPORTS_DIR)
    files = sorted(os.listdir(exports_dir)) if os.path.isdir(exports_dir) else []
    if files:
        status["export"] = {"state": "done", "files": len(files), "latest": files[-1]}
    else:
        status["export"] = {"state": "pending"}

    return status


def list_projects(output_base: str = OUTPUT_DIR) -> list[str]:
    """Sorted slugs of directories under output_base that hold a chunks.json."""
    if not os.path.exists(output_base):
        return []
    projects = []
    for name in os.listdir(output_base):
        project_dir = os.path.join(output_base, name)
        if os.path.isdir(project_dir) and os.path.exists(os.path.join(project_dir, CHUNKS_FILE)):
            projects.append(name)
    return sorted(projects)
