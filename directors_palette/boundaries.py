"""Find and score candidate shot boundaries in prose and lyrics."""

import re

from directors_palette.models import TextBoundary
from directors_palette.constants import (
    BOUNDARY_DEDUP_DISTANCE,
    CONTEXT_WINDOW_CHARS,
    DIALOGUE_EDGE_BONUS,
    EMOTION_WORDS,
    EMOTIONAL_TRANSITION_BONUS,
    INTRODUCTION_BONUS,
    LINE_BASE_SCORE,
    MAX_BOUNDARY_SCORE,
    PARAGRAPH_BREAK_BONUS,
    PUNCTUATION_BASE_SCORE,
    PUNCTUATION_BONUS,
    RHYME_BONUS,
    SECTION_MARKERS,
    SECTION_TRANSITION_BONUS,
)

# Punctuation that can end a shot, only when followed by whitespace
_PUNCTUATION_RE = re.compile(r"[.!?,;:](?=\s)")

# A whole line that is a section marker: [INTRO], [VERSE 1], [HOOK]
_SECTION_LINE_RE = re.compile(r"^\[.*\]$")

# Marker touching a punctuation boundary on either side
_MARKER_BEFORE_RE = re.compile(r"\[.*\]$")
_MARKER_AFTER_RE = re.compile(r"^\[.*\]")

# Blank line directly after the punctuation mark
_PARAGRAPH_BREAK_RE = re.compile(r"[ \t\r]*\n[ \t\r]*\n")

# Character/location introductions at the start of the following text
_INTRODUCTION_PATTERNS = (
    re.compile(r"^(meet|this is|there was|there lived)", re.IGNORECASE),
    re.compile(r"^(at|in|on) (the|a) ", re.IGNORECASE),
    re.compile(r"^[A-Z][a-z]+ (was|is|had)"),
)

_PUNCTUATION_TYPES = {
    ".": "sentence",
    "!": "sentence",
    "?": "sentence",
    ",": "scene_change",
    ";": "dialogue",
    ":": "dialogue",
}

_PUNCTUATION_REASONS = {
    ".": "Sentence end - natural shot boundary",
    "!": "Exclamation - emotional peak",
    "?": "Question - dialogue moment",
    ",": "Comma pause - granular control point",
    ";": "Semicolon - strong narrative break",
    ":": "Colon - setup/payoff transition",
}


def _last_word_letters(line: str) -> str:
    """Letters of the last whitespace-separated word, lowercased."""
    words = line.split()
    if not words:
        return ""
    return re.sub(r"[^a-z]", "", words[-1].lower())


def lines_rhyme(line1: str, line2: str) -> bool:
    """Crude end-rhyme check: the last two letters of both lines match."""
    end1 = _last_word_letters(line1)
    end2 = _last_word_letters(line2)
    if len(end1) < 2 or len(end2) < 2:
        return False
    return end1[-2:] == end2[-2:]


def has_emotional_transition(line1: str, line2: str) -> bool:
    """True when exactly one of the two lines mentions an emotion word."""
    first = any(word in line1.lower() for word in EMOTION_WORDS)
    second = any(word in line2.lower() for word in EMOTION_WORDS)
    return first != second


def has_section_transition(line1: str, line2: str) -> bool:
    """True when either line names a section like [Verse or [Chorus."""
    lowered = (line1.lower(), line2.lower())
    return any(f"[{marker}" in line for marker in SECTION_MARKERS for line in lowered)


def has_introduction_pattern(text: str) -> bool:
    stripped = text.strip()
    return any(pattern.search(stripped) for pattern in _INTRODUCTION_PATTERNS)


def score_line_break(current: str, following: str) -> int:
    score = LINE_BASE_SCORE
    if lines_rhyme(current, following):
        score += RHYME_BONUS
    if has_emotional_transition(current, following):
        score += EMOTIONAL_TRANSITION_BONUS
    if has_section_transition(current, following):
        score += SECTION_TRANSITION_BONUS
    return min(MAX_BOUNDARY_SCORE, score)


def _line_break_reason(current: str, following: str) -> str:
    if has_section_transition(current, following):
        return "Section transition - natural break"
    if has_emotional_transition(current, following):
        return "Emotional shift - good shot boundary"
    if lines_rhyme(current, following):
        return "Rhyme pattern - lyrical structure"
    return "Line break - structural boundary"


def score_punctuation(mark: str, before: str, after: str, raw_after: str = "") -> int:
    """Score a punctuation boundary from its mark and surrounding context.

    ``before``/``after`` are the trimmed context windows; ``raw_after`` is the
    untrimmed text following the mark, used to spot a blank-line break.
    """
    score = PUNCTUATION_BASE_SCORE + PUNCTUATION_BONUS.get(mark, 0)

    # Dialogue edge: a quote opens or closes across the boundary
    if ('"' in before) != ('"' in after):
        score += DIALOGUE_EDGE_BONUS

    if _PARAGRAPH_BREAK_RE.match(raw_after):
        score += PARAGRAPH_BREAK_BONUS

    if has_introduction_pattern(after):
        score += INTRODUCTION_BONUS

    return min(MAX_BOUNDARY_SCORE, score)


def find_line_boundaries(text: str) -> list[TextBoundary]:
    """One boundary per newline between two non-blank, non-marker lines.

    The boundary position is the offset of the newline itself.
    """
    boundaries = []
    lines = text.split("\n")
    position = 0

    for i in range(len(lines) - 1):
        position += len(lines[i])
        current = lines[i].strip()
        following = lines[i + 1].strip()

        usable = (
            current
            and following
            and not _SECTION_LINE_RE.match(current)
            and not _SECTION_LINE_RE.match(following)
        )
        if usable:
            boundaries.append(TextBoundary(
                position=position,
                score=score_line_break(current, following),
                type="sentence",
                reason=_line_break_reason(current, following),
            ))

        position += 1  # the newline

    return boundaries


def find_punctuation_boundaries(text: str) -> list[TextBoundary]:
    """One boundary after every punctuation mark that is followed by whitespace."""
    boundaries = []

    for match in _PUNCTUATION_RE.finditer(text):
        mark = match.group(0)
        position = match.end()

        raw_after = text[position:position + CONTEXT_WINDOW_CHARS]
        before = text[max(0, position - CONTEXT_WINDOW_CHARS):position].strip()
        after = raw_after.strip()

        # Would leave an empty shot on one side
        if not before or not after:
            continue
        if _MARKER_BEFORE_RE.search(before) or _MARKER_AFTER_RE.match(after):
            continue

        boundaries.append(TextBoundary(
            position=position,
            score=score_punctuation(mark, before, after, raw_after),
            type=_PUNCTUATION_TYPES[mark],
            reason=_PUNCTUATION_REASONS[mark],
        ))

    return boundaries


def merge_boundaries(
    boundaries: list[TextBoundary],
    min_distance: int = BOUNDARY_DEDUP_DISTANCE,
) -> list[TextBoundary]:
    """Drop near-duplicates and sort by position.

    A boundary survives only if no earlier entry in ``boundaries`` sits within
    ``min_distance`` characters of it, so list order decides which detector wins.
    """
    kept = []
    for index, boundary in enumerate(boundaries):
        first = next(
            i for i, other in enumerate(boundaries)
            if abs(other.position - boundary.position) < min_distance
        )
        if first == index:
            kept.append(boundary)
    return sorted(kept, key=lambda b: b.position)


def find_boundaries(text: str, parsing_mode: str = "hybrid") -> list[TextBoundary]:
    """Run the detectors for ``parsing_mode`` over already-trimmed text."""
    if parsing_mode == "lines":
        return find_line_boundaries(text)
    if parsing_mode == "punctuation":
        return find_punctuation_boundaries(text)
    return merge_boundaries(find_line_boundaries(text) + find_punctuation_boundaries(text))
