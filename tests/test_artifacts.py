"""Tests for artifacts module: project dirs, shot lists, export settings."""

import json
import os

import pytest
from pydantic import ValidationError

from directors_palette.artifacts import (
    CHUNKS_FILE,
    EXPORTS_DIR,
    get_project_status,
    init_output_dir,
    invalidate_downstream,
    list_projects,
    load_artifact,
    load_export_settings,
    load_shots,
    load_variables,
    parse_shots,
    shots_to_records,
    slug_from_path,
    write_artifact,
    write_export,
)
from directors_palette.models import ExportResult, ShotData, ShotMetadata
from directors_palette.schemas import ExportSettings, ShotRecord


# --- Directory and file management ---

def test_slug_from_path():
    assert slug_from_path("Neon Nights.txt") == "neon_nights"
    assert slug_from_path("/path/to/The Heist (draft).md") == "the_heist_draft"


def test_init_output_dir(tmp_path):
    """Creates the project dir with its exports/ subdir."""
    project_dir = init_output_dir(str(tmp_path / "story.txt"), output_base=str(tmp_path / "output"))
    assert os.path.isdir(project_dir)
    assert os.path.isdir(os.path.join(project_dir, EXPORTS_DIR))


def test_init_output_dir_existing(tmp_path):
    """Re-running on an existing dir keeps its files."""
    story = str(tmp_path / "story.txt")
    project_dir = init_output_dir(story, output_base=str(tmp_path / "output"))
    write_artifact(project_dir, "keep.json", {"a": 1})
    init_output_dir(story, output_base=str(tmp_path / "output"))
    assert load_artifact(project_dir, "keep.json") == {"a": 1}


def test_write_and_load_artifact(tmp_path):
    write_artifact(str(tmp_path), "data.json", {"text": "Café", "n": 3})
    assert load_artifact(str(tmp_path), "data.json") == {"text": "Café", "n": 3}
    assert "Café" in (tmp_path / "data.json").read_text(encoding="utf-8")


def test_load_artifact_missing(tmp_path):
    assert load_artifact(str(tmp_path), "nope.json") is None


def test_load_artifact_malformed(tmp_path):
    (tmp_path / "bad.json").write_text("{not json")
    assert load_artifact(str(tmp_path), "bad.json") is None


# --- Variables sidecar ---

def test_load_variables(tmp_path):
    source = tmp_path / "song.txt"
    source.write_text("lyrics")
    (tmp_path / "song.vars.json").write_text(json.dumps({"artist": "Nova", "bpm": 120, "mood": None}))
    assert load_variables(str(source)) == {"artist": "Nova", "bpm": "120"}


def test_load_variables_drops_empty_names(tmp_path):
    source = tmp_path / "song.txt"
    (tmp_path / "song.vars.json").write_text(json.dumps({"": "x", "director": "Ava"}))
    assert load_variables(str(source)) == {"director": "Ava"}


def test_load_variables_missing_or_invalid(tmp_path):
    source = tmp_path / "song.txt"
    assert load_variables(str(source)) == {}
    (tmp_path / "song.vars.json").write_text("[1, 2]")
    assert load_variables(str(source)) == {}
    (tmp_path / "song.vars.json").write_text("{oops")
    assert load_variables(str(source)) == {}


# --- Shot lists ---

def test_parse_shots_bare_list():
    shots = parse_shots([
        {"id": "shot-1", "description": "Wide shot", "shotNumber": 1,
         "metadata": {"directorStyle": "Ava", "sourceType": "story"}},
        {"id": "shot-2", "description": "Close-up", "chapter": "Act II"},
    ])
    assert shots[0] == ShotData(
        id="shot-1", description="Wide shot", shot_number=1,
        metadata=ShotMetadata(director_style="Ava", source_type="story"),
    )
    assert shots[1].chapter == "Act II"
    assert shots[1].shot_number == 0


def test_parse_shots_wrapped_object():
    shots = parse_shots({"shots": [{"id": "a", "description": "b"}], "totalShots": 1})
    assert [s.id for s in shots] == ["a"]


def test_parse_shots_tolerates_nulls():
    """Null id/description become empty strings instead of failing."""
    shots = parse_shots([{"id": None, "description": None, "shotNumber": 0}])
    assert shots == [ShotData(id="", description="")]


def test_parse_shots_skips_invalid(caplog):
    shots = parse_shots([{"id": "ok", "description": "fine"}, {"id": "bad", "shotNumber": "first"}, "junk"])
    assert [s.id for s in shots] == ["ok"]
    assert "Skipping invalid shot #2" in caplog.text


def test_parse_shots_not_a_list():
    assert parse_shots({"shots": "nope"}) == []


def test_load_shots_missing_and_malformed(tmp_path):
    assert load_shots(str(tmp_path / "missing.json")) == []
    (tmp_path / "bad.json").write_text("[{")
    assert load_shots(str(tmp_path / "bad.json")) == []


def test_shots_to_records_round_trip(tmp_path, noir_shots):
    write_artifact(str(tmp_path), "shots.json", {"shots": shots_to_records(noir_shots)})
    assert load_shots(str(tmp_path / "shots.json")) == noir_shots


def test_shots_to_records_omits_empty_fields():
    record = shots_to_records([ShotData(id="s1", description="Wide", shot_number=1)])[0]
    assert record == {"id": "s1", "description": "Wide", "shotNumber": 1}


def test_shot_record_accepts_snake_case():
    record = ShotRecord.model_validate({"id": "s", "description": "d", "shot_number": 4})
    assert record.to_shot().shot_number == 4


# --- Export settings ---

def test_export_settings_defaults(tmp_path):
    settings = load_export_settings(str(tmp_path))
    assert settings == ExportSettings()
    assert settings.to_config().format == "text"


def test_export_settings_round_trip(tmp_path):
    settings = ExportSettings(prefix="Scene: ", format="csv", include_metadata=True,
                              variables={"director": "Ava"})
    write_artifact(str(tmp_path), "export.json", settings.to_dict())
    data = json.loads((tmp_path / "export.json").read_text())
    assert data["includeMetadata"] is True
    assert data["useArtistDescriptions"] is False

    loaded = load_export_settings(str(tmp_path))
    assert loaded == settings
    config = loaded.to_config()
    assert config.prefix == "Scene: "
    assert config.include_metadata is True


def test_export_settings_invalid_falls_back(tmp_path, caplog):
    write_artifact(str(tmp_path), "export.json", {"format": "pdf"})
    assert load_export_settings(str(tmp_path)) == ExportSettings()
    assert "using defaults" in caplog.text


def test_export_settings_rejects_unknown_format():
    with pytest.raises(ValidationError):
        ExportSettings.model_validate({"format": "docx"})


def test_write_export(tmp_path):
    result = ExportResult(formatted_text="1. Wide shot", total_shots=1, processing_time=0.1)
    path = write_export(str(tmp_path), result, "story-shots.txt")
    assert path == os.path.join(str(tmp_path), EXPORTS_DIR, "story-shots.txt")
    with open(path, encoding="utf-8") as f:
        assert f.read() == "1. Wide shot"


# --- Invalidation ---

def test_invalidate_clears_exports(tmp_path):
    project_dir = init_output_dir(str(tmp_path / "story.txt"), output_base=str(tmp_path / "output"))
    (tmp_path / "output" / "story" / EXPORTS_DIR / "old.txt").write_text("stale")
    cleared = invalidate_downstream(project_dir, "prefix")
    assert cleared == [EXPORTS_DIR]
    assert os.listdir(os.path.join(project_dir, EXPORTS_DIR)) == []


def test_invalidate_empty_or_unknown(tmp_path):
    project_dir = init_output_dir(str(tmp_path / "story.txt"), output_base=str(tmp_path / "output"))
    assert invalidate_downstream(project_dir, "format") == []
    assert invalidate_downstream(project_dir, "nonsense") == []


# --- Status ---

def test_project_status_pending(tmp_path):
    project_dir = init_output_dir(str(tmp_path / "story.txt"), output_base=str(tmp_path / "output"))
    status = get_project_status(project_dir)
    assert status == {
        "chunk": {"state": "pending"},
        "shots": {"state": "pending"},
        "export": {"state": "pending"},
    }


def test_project_status_done(tmp_path, noir_shots):
    project_dir = init_output_dir(str(tmp_path / "story.txt"), output_base=str(tmp_path / "output"))
    write_artifact(project_dir, CHUNKS_FILE, {"chunks": [{"id": "shot_1"}, {"id": "shot_2"}]})
    write_artifact(project_dir, "shots.json", {"shots": shots_to_records(noir_shots)})
    result = ExportResult(formatted_text="x", total_shots=1, processing_time=0.0)
    write_export(project_dir, result, "a.txt")
    write_export(project_dir, result, "b.txt")

    status = get_project_status(project_dir)
    assert status["chunk"] == {"state": "done", "chunks": 2}
    assert status["shots"] == {"state": "done", "shots": 3}
    assert status["export"] == {"state": "done", "files": 2, "latest": "b.txt"}


def test_project_status_chunks_not_an_object(tmp_path):
    """A chunks.json holding a bare list counts as pending."""
    project_dir = init_output_dir(str(tmp_path / "story.txt"), output_base=str(tmp_path / "output"))
    write_artifact(project_dir, CHUNKS_FILE, [{"id": "shot_1"}])
    assert get_project_status(project_dir)["chunk"] == {"state": "pending"}


def test_list_projects(tmp_path):
    output = tmp_path / "output"
    assert list_projects(str(output)) == []
    for name in ("zeta", "alpha"):
        write_artifact(init_output_dir(f"{name}.txt", output_base=str(output)), CHUNKS_FILE, {"chunks": []})
    init_output_dir("half.txt", output_base=str(output))
    assert list_projects(str(output)) == ["alpha", "zeta"]
