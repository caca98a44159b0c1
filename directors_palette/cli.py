"""CLI interface with subcommand routing for chunking and export."""

import argparse
import logging
import os
import sys

from directors_palette.constants import (
    CONTENT_PRESETS,
    DEFAULT_PARSING_MODE,
    EXPORT_FORMATS,
    OUTPUT_DIR,
    PARSING_MODES,
    VERSION,
)
from directors_palette.models import ChunkingOptions, ShotMetadata
from directors_palette.chunker import TextChunker
from directors_palette.exporter import (
    get_suggested_filename,
    normalize_variables,
    process_shots_for_export,
    shots_from_chunks,
)
from directors_palette.schemas import ExportSettings
from directors_palette.artifacts import (
    CHUNKS_FILE,
    EXPORT_SETTINGS_FILE,
    SHOTS_FILE,
    get_project_status,
    init_output_dir,
    invalidate_downstream,
    list_projects,
    load_artifact,
    load_export_settings,
    load_shots,
    load_variables,
    shots_to_records,
    slug_from_path,
    write_artifact,
    write_export,
)


def _fail(message: str, hint: str | None = None):
    print(f"Error: {message}", file=sys.stderr)
    if hint:
        print(hint, file=sys.stderr)
    raise SystemExit(1)


def _read_source(file_path: str) -> str:
    """Read a source text file, exiting on missing or empty input."""
    if not os.path.exists(file_path):
        _fail(f"File not found: {file_path}")
    with open(file_path, encoding="utf-8") as f:
        text = f.read()
    if not text.strip():
        _fail(f"File is empty: {file_path}")
    return text


def _get_project_dir(slug: str) -> str:
    """Get project directory path, verify it exists."""
    project_dir = os.path.join(OUTPUT_DIR, slug)
    if not os.path.isdir(project_dir):
        _fail(f"Project '{slug}' not found.", "Run 'palette new <file>' to create a project.")
    if not os.path.exists(os.path.join(project_dir, CHUNKS_FILE)):
        _fail(f"Project '{slug}' is incomplete (no {CHUNKS_FILE}).")
    return project_dir


def _load_chunk_data(project_dir: str) -> dict:
    data = load_artifact(project_dir, CHUNKS_FILE)
    return data if isinstance(data, dict) else {}


def _build_options(target: int, mode: str, content_type: str | None) -> ChunkingOptions:
    if content_type:
        return ChunkingOptions.for_content(content_type, target, parsing_mode=mode)
    return ChunkingOptions(target_shot_count=target, parsing_mode=mode)


def _shot_metadata(variables: dict, content_type: str | None) -> ShotMetadata:
    return ShotMetadata(
        director_style=normalize_variables(variables).get("director"),
        source_type="music-video" if content_type == "lyrics" else "story",
    )


def _write_chunking(project_dir: str, source: str, chunker: TextChunker,
                    options: ChunkingOptions, variables: dict) -> int:
    """Chunk, then write chunks.json and a fresh shots.json. Returns shot count."""
    chunks = chunker.generate_chunks(options)
    write_artifact(project_dir, CHUNKS_FILE, {
        "source": source,
        "text": chunker.text,
        "options": options.to_dict(),
        "boundaries": len(chunker.get_boundaries()),
        "chunks": [c.to_dict() for c in chunks],
    })
    shots = shots_from_chunks(chunks, metadata=_shot_metadata(variables, options.content_type))
    write_artifact(project_dir, SHOTS_FILE, {"shots": shots_to_records(shots)})
    return len(chunks)


def _on_off(key: str, values: list[str]) -> bool:
    if not values or values[0] not in ("on", "off"):
        _fail(f"'set {key}' requires 'on' or 'off'")
    return values[0] == "on"


def cmd_new(args):
    """Create a new project by chunking a text file."""
    file_path = args.file
    text = _read_source(file_path)

    slug = slug_from_path(file_path)
    if os.path.exists(os.path.join(OUTPUT_DIR, slug, CHUNKS_FILE)):
        _fail(
            f"Project '{slug}' already exists.",
            f"Use 'palette set {slug} shots <n>' to re-chunk, or 'palette export {slug}'.",
        )

    mode = args.mode or DEFAULT_PARSING_MODE
    chunker = TextChunker(text, mode)

    target = args.shots
    if target is None:
        suggestions = chunker.suggest_shot_counts()
        target = suggestions[0].count if suggestions else 1

    variables = load_variables(file_path)
    if args.director:
        variables["director"] = args.director

    project_dir = init_output_dir(file_path, output_base=OUTPUT_DIR)
    options = _build_options(target, mode, args.content_type)
    count = _write_chunking(project_dir, os.path.abspath(file_path), chunker, options, variables)
    write_artifact(project_dir, EXPORT_SETTINGS_FILE, ExportSettings(variables=variables).to_dict())

    print(f"Created project: {slug}")
    print(f"Chunked into {count} shots ({len(chunker.get_boundaries())} candidate boundaries, {mode} mode)")
    print(f"Shot list written to {OUTPUT_DIR}/{slug}/{SHOTS_FILE}")
    print(f"Run 'palette status {slug}' to review, or 'palette export {slug}' to render it.")


def cmd_status(args):
    """Show project status."""
    slug = args.slug
    project_dir = _get_project_dir(slug)

    chunk_data = _load_chunk_data(project_dir)
    settings = load_export_settings(project_dir)
    status = get_project_status(project_dir)
    options = chunk_data.get("options", {})

    print(f"Project: {slug}")
    print(f"Source:  {chunk_data.get('source', 'unknown')}")
    print(f"Chunks:  {len(chunk_data.get('chunks', []))} of {options.get('targetShotCount', '?')} requested "
          f"({chunk_data.get('boundaries', 0)} boundaries, {options.get('parsingMode') or DEFAULT_PARSING_MODE} mode)")
    print(f"Export:  format={settings.format} prefix={settings.prefix!r} suffix={settings.suffix!r} "
          f"separator={settings.separator!r} metadata={'on' if settings.include_metadata else 'off'}")
    if settings.variables:
        print("Variables:")
        for name, value in sorted(settings.variables.items()):
            print(f"  @{name:<14} → {value}")

    print("Steps:")
    for step in ("chunk", "shots", "export"):
        info = status.get(step, {"state": "pending"})
        marker = "[done]" if info["state"] == "done" else "[----]"
        details = ""
        if "chunks" in info:
            details = f" ({info['chunks']} chunks)"
        elif "shots" in info:
            details = f" ({info['shots']} shots)"
        elif "files" in info:
            details = f" ({info['files']} files, latest {info['latest']})"
        print(f"  {marker} {step:<8}{details}")


def _rechunk(project_dir: str, key: str, values: list[str]) -> str:
    """Re-run chunking with a new shot count or parsing mode."""
    chunk_data = _load_chunk_data(project_dir)
    options = chunk_data.get("options", {})
    target = options.get("targetShotCount", 1)
    mode = options.get("parsingMode") or DEFAULT_PARSING_MODE

    if key == "shots":
        if not values:
            _fail("'set shots' requires <count>")
        try:
            target = int(values[0])
        except ValueError:
            _fail(f"Invalid shot count: {values[0]}")
        if target < 1:
            _fail(f"Shot count must be at least 1: {target}")
    else:
        if not values or values[0] not in PARSING_MODES:
            _fail(f"'set mode' requires one of: {', '.join(PARSING_MODES)}")
        mode = values[0]

    settings = load_export_settings(project_dir)
    chunker = TextChunker(chunk_data.get("text", ""), mode)
    new_options = _build_options(target, mode, options.get("contentType"))
    count = _write_chunking(project_dir, chunk_data.get("source", ""), chunker, new_options, settings.variables)
    return f"Updated: re-chunked into {count} shots ({mode} mode); {SHOTS_FILE} regenerated"


def cmd_set(args):
    """Update chunking or export settings."""
    slug = args.slug
    project_dir = _get_project_dir(slug)
    key = args.key
    values = args.values

    valid_keys = {
        "shots", "mode", "prefix", "suffix", "format", "separator",
        "metadata", "artist-descriptions", "var",
    }
    if key not in valid_keys:
        _fail(f"Invalid setting key: {key}", f"Valid keys: {', '.join(sorted(valid_keys))}")

    if key in ("shots", "mode"):
        message = _rechunk(project_dir, key, values)
    else:
        settings = load_export_settings(project_dir)

        if key in ("prefix", "suffix"):
            value = " ".join(values)
            setattr(settings, key, value)
            message = f"Updated: {key} → {value!r}"

        elif key == "format":
            if not values or values[0] not in EXPORT_FORMATS:
                _fail(f"'set format' requires one of: {', '.join(EXPORT_FORMATS)}")
            settings.format = values[0]
            message = f"Updated: format → {values[0]}"

        elif key == "separator":
            if not values:
                _fail("'set separator' requires <text> (use \\n for newlines)")
            settings.separator = values[0].replace("\\n", "\n")
            message = f"Updated: separator → {settings.separator!r}"

        elif key == "metadata":
            settings.include_metadata = _on_off(key, values)
            message = f"Updated: metadata → {values[0]}"

        elif key == "artist-descriptions":
            settings.use_artist_descriptions = _on_off(key, values)
            message = f"Updated: artist descriptions → {values[0]}"

        else:  # var
            if not values:
                _fail("'set var' requires <name> [value...]")
            name = values[0].lstrip("@")
            if not name:
                _fail("'set var' requires a non-empty <name>")
            value = " ".join(values[1:])
            if value:
                settings.variables[name] = value
                message = f"Updated: @{name} → {value}"
            else:
                settings.variables.pop(name, None)
                message = f"Removed: @{name}"

        write_artifact(project_dir, EXPORT_SETTINGS_FILE, settings.to_dict())

    print(message)

    cleared = invalidate_downstream(project_dir, key)
    if cleared:
        print(f"Invalidated: {', '.join(cleared)} (re-run 'palette export {slug}')")


def cmd_export(args):
    """Render the project's shot list."""
    slug = args.slug
    project_dir = _get_project_dir(slug)

    settings = load_export_settings(project_dir)
    config = settings.to_config()
    if args.format:
        config.format = args.format

    shots_path = args.shots_file or os.path.join(project_dir, SHOTS_FILE)
    if args.shots_file and not os.path.exists(shots_path):
        _fail(f"File not found: {shots_path}")
    shots = load_shots(shots_path)

    result = process_shots_for_export(shots, config, settings.variables)

    if args.stdout:
        print(result.formatted_text)
        return

    chunk_data = _load_chunk_data(project_dir)
    project_type = chunk_data.get("options", {}).get("contentType") or "story"
    artist = normalize_variables(settings.variables).get("artist")
    filename = get_suggested_filename(config, project_type, artist_name=artist)
    path = write_export(project_dir, result, filename)
    print(f"Exported {result.total_shots} shots ({config.format}) → {path}")


def cmd_suggest(args):
    """Suggest shot counts for a text file."""
    chunker = TextChunker(_read_source(args.file), args.mode or DEFAULT_PARSING_MODE)
    suggestions = chunker.suggest_shot_counts()
    if not suggestions:
        print("No suggestions; the text has too little structure.")
        return
    print("Suggested shot counts:")
    for s in suggestions:
        print(f"  {s.count:>3} shots  [confidence {s.confidence}]  {s.reason}")


def cmd_boundaries(args):
    """List candidate boundaries for a text file."""
    chunker = TextChunker(_read_source(args.file), args.mode or DEFAULT_PARSING_MODE)
    boundaries = [b for b in chunker.get_boundaries() if b.score >= args.min_score]
    if not boundaries:
        print("No boundaries found.")
        return
    print(f"{len(boundaries)} boundaries:")
    for b in boundaries:
        print(f"  @{b.position:<6} score {b.score:>2}  {b.type:<12} {b.reason}")


def cmd_list(args):
    """List all projects."""
    projects = list_projects(output_base=OUTPUT_DIR)
    if not projects:
        print("No projects found.")
        return
    print("Projects:")
    for name in projects:
        status = get_project_status(os.path.join(OUTPUT_DIR, name))
        marker = "[done]" if status.get("export", {}).get("state") == "done" else "[----]"
        print(f"  {marker} {name}")


def cmd_presets(args):
    """List content presets."""
    print("Content presets:")
    for name, preset in CONTENT_PRESETS.items():
        natural = "natural breaks" if preset["prefer_natural_breaks"] else "any breaks"
        print(f"  {name:<14} {preset['min_words_per_shot']}-{preset['max_words_per_shot']} words/shot, {natural}")


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="palette",
        description="Director's Palette: split stories and lyrics into shots and export shot lists",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # new
    new_parser = subparsers.add_parser("new", help="Create a new project from a text file")
    new_parser.add_argument("file", help="Path to the story or lyrics text file")
    new_parser.add_argument("--shots", type=int, help="Target shot count (default: top suggestion)")
    new_parser.add_argument("--mode", choices=PARSING_MODES, help="Boundary parsing mode (default: hybrid)")
    new_parser.add_argument("--content-type", choices=sorted(CONTENT_PRESETS), help="Content preset")
    new_parser.add_argument("--director", help="Value for the @director placeholder")
    new_parser.set_defaults(func=cmd_new)

    # status
    status_parser = subparsers.add_parser("status", help="Show project status")
    status_parser.add_argument("slug", help="Project slug")
    status_parser.set_defaults(func=cmd_status)

    # set
    set_parser = subparsers.add_parser("set", help="Update chunking or export settings")
    set_parser.add_argument("slug", help="Project slug")
    set_parser.add_argument("key", help="Setting key")
    set_parser.add_argument("values", nargs="*", help="Setting value(s)")
    set_parser.set_defaults(func=cmd_set)

    # export
    export_parser = subparsers.add_parser("export", help="Render the shot list")
    export_parser.add_argument("slug", help="Project slug")
    export_parser.add_argument("--format", choices=EXPORT_FORMATS, help="Override the project format")
    export_parser.add_argument("--shots-file", help="Export this shot list instead of the project's")
    export_parser.add_argument("--stdout", action="store_true", help="Print instead of writing a file")
    export_parser.set_defaults(func=cmd_export)

    # suggest
    suggest_parser = subparsers.add_parser("suggest", help="Suggest shot counts for a text file")
    suggest_parser.add_argument("file", help="Path to the text file")
    suggest_parser.add_argument("--mode", choices=PARSING_MODES, help="Boundary parsing mode")
    suggest_parser.set_defaults(func=cmd_suggest)

    # boundaries
    boundaries_parser = subparsers.add_parser("boundaries", help="List candidate shot boundaries")
    boundaries_parser.add_argument("file", help="Path to the text file")
    boundaries_parser.add_argument("--mode", choices=PARSING_MODES, help="Boundary parsing mode")
    boundaries_parser.add_argument("--min-score", type=int, default=0, help="Hide weaker boundaries")
    boundaries_parser.set_defaults(func=cmd_boundaries)

    # list
    list_parser = subparsers.add_parser("list", help="List all projects")
    list_parser.set_defaults(func=cmd_list)

    # presets
    presets_parser = subparsers.add_parser("presets", help="List content presets")
    presets_parser.set_defaults(func=cmd_presets)

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return

    args.func(args)
