"""Shared fixtures for shot chunking and export tests."""

import pytest

from directors_palette.models import ShotData, ShotMetadata


# Three sentences: "." (5), "," (3), "." (5) boundaries, no newlines
SIMPLE_TEXT = "The sun rose over the hills. Birds began to sing, and the village woke. Maria opened her shop."

STORY_TEXT = (
    "There was an old lighthouse on the cliff. The keeper lived alone, and he waited.\n\n"
    "At the harbor, a ship appeared. \"Who goes there?\" he shouted.\n\n"
    "Anna was the captain. She smiled; the storm had passed."
)

LYRICS_TEXT = (
    "[Verse 1]\n"
    "I walk alone at night\n"
    "Chasing shadows in the light\n"
    "Love is all I need\n"
    "\n"
    "[Chorus]\n"
    "We rise, we fall\n"
    "We give it all"
)


@pytest.fixture
def simple_text():
    return SIMPLE_TEXT


@pytest.fixture
def story_text():
    return STORY_TEXT


@pytest.fixture
def lyrics_text():
    return LYRICS_TEXT


@pytest.fixture
def noir_shots():
    """Pre-built shots for exporter/CLI tests."""
    metadata = ShotMetadata(director_style="David Fincher", source_type="story",
                            timestamp="2024-01-15T20:00:00Z")
    return [
        ShotData(id="shot-1", description="Wide establishing shot of @warehouse exterior at night",
                 chapter="Act I", shot_number=1, metadata=metadata),
        ShotData(id="shot-2", description="Medium shot of @sarah-chen entering through the broken door",
                 chapter="Act I", shot_number=2, metadata=metadata),
        ShotData(id="shot-3", description="Close-up of @red-briefcase on a metal table",
                 chapter="Act I", shot_number=3, metadata=metadata),
    ]
