"""Split text into shot-sized chunks at the strongest narrative boundaries."""

import logging
import math
import re

from directors_palette.boundaries import find_boundaries
from directors_palette.models import ChunkingOptions, ShotChunk, ShotSuggestion, TextBoundary
from directors_palette.constants import (
    CONTENT_PRESETS,
    DEFAULT_PARSING_MODE,
    DETAILED_CONFIDENCE,
    FINAL_CHUNK_SCORE,
    HIGH_SCORE_THRESHOLD,
    MAX_SUGGESTED_SHOTS,
    MIN_PARAGRAPHS_FOR_SUGGESTION,
    PARAGRAPH_CONFIDENCE,
    PARSING_MODES,
    SINGLE_SHOT_SCORE,
    STRONG_BREAK_CONFIDENCE,
    WORDS_PER_SHOT,
)

logger = logging.getLogger(__name__)

# Sentence ends followed by a capitalised word
_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+(?=[A-Z])")


def _skip_to_word_start(text: str, position: int) -> int:
    """Advance past the rest of any word, then past the whitespace after it."""
    while position < len(text) and not text[position].isspace():
        position += 1
    while position < len(text) and text[position].isspace():
        position += 1
    return position


class TextChunker:
    """Boundary analysis and shot chunking for one piece of text.

    All analysis happens in the constructor; the query methods only read the
    precomputed boundaries, so an instance can be chunked repeatedly with
    different shot counts.
    """

    def __init__(self, text: str, parsing_mode: str = DEFAULT_PARSING_MODE):
        if parsing_mode not in PARSING_MODES:
            logger.warning("Unknown parsing mode %r, using %s", parsing_mode, DEFAULT_PARSING_MODE)
            parsing_mode = DEFAULT_PARSING_MODE
        self.text = (text or "").strip()
        self.parsing_mode = parsing_mode
        self.sentences = [s for s in _SENTENCE_SPLIT_RE.split(self.text) if s.strip()]
        self.boundaries = find_boundaries(self.text, parsing_mode)
        logger.debug(
            "Analyzed %d chars in %s mode: %d sentences, %d boundaries",
            len(self.text), parsing_mode, len(self.sentences), len(self.boundaries),
        )

    def generate_chunks(self, options: ChunkingOptions) -> list[ShotChunk]:
        """Cut the text at the ``target_shot_count - 1`` best-scoring boundaries.

        Selection is greedy by score, so strong boundaries that cluster together
        can leave one long chunk elsewhere. Chunks never split a word and are
        never empty; fewer chunks than requested come back when the text has
        too few boundaries.
        """
        if not self.text:
            return []

        target = options.target_shot_count
        if target <= 1:
            return [ShotChunk(
                id="shot_1",
                text=self.text,
                start_pos=0,
                end_pos=len(self.text),
                boundary_score=SINGLE_SHOT_SCORE,
            )]

        boundaries = self.boundaries
        if options.parsing_mode in PARSING_MODES and options.parsing_mode != self.parsing_mode:
            boundaries = find_boundaries(self.text, options.parsing_mode)

        # Stable sort keeps earlier boundaries first among equal scores
        by_score = sorted(boundaries, key=lambda b: b.score, reverse=True)
        selected = sorted(by_score[:target - 1], key=lambda b: b.position)

        chunks = []
        last_position = 0
        for boundary in selected:
            chunk_text = self.text[last_position:boundary.position].strip()
            if chunk_text:
                chunks.append(ShotChunk(
                    id=f"shot_{len(chunks) + 1}",
                    text=chunk_text,
                    start_pos=last_position,
                    end_pos=boundary.position,
                    boundary_score=boundary.score,
                ))
            last_position = _skip_to_word_start(self.text, boundary.position)

        final_text = self.text[last_position:].strip()
        if final_text:
            chunks.append(ShotChunk(
                id=f"shot_{len(chunks) + 1}",
                text=final_text,
                start_pos=last_position,
                end_pos=len(self.text),
                boundary_score=FINAL_CHUNK_SCORE,
            ))

        self._log_word_range(chunks, options)
        return chunks

    def _log_word_range(self, chunks: list[ShotChunk], options: ChunkingOptions) -> None:
        for chunk in chunks:
            words = chunk.word_count
            if words < options.min_words_per_shot or words > options.max_words_per_shot:
                logger.debug(
                    "%s has %d words, outside %d-%d",
                    chunk.id, words, options.min_words_per_shot, options.max_words_per_shot,
                )

    def get_boundaries(self) -> list[TextBoundary]:
        """All detected boundaries in position order."""
        return list(self.boundaries)

    def suggest_shot_counts(self) -> list[ShotSuggestion]:
        """Heuristic shot counts, most confident first."""
        word_count = len(self.text.split())
        paragraph_count = len(self.text.split("\n\n"))
        strong_breaks = sum(1 for b in self.boundaries if b.score >= HIGH_SCORE_THRESHOLD)

        suggestions = []

        if paragraph_count >= MIN_PARAGRAPHS_FOR_SUGGESTION:
            suggestions.append(ShotSuggestion(
                count=paragraph_count,
                reason=f"Natural paragraph structure ({paragraph_count} paragraphs)",
                confidence=PARAGRAPH_CONFIDENCE,
            ))

        if strong_breaks > 0:
            suggestions.append(ShotSuggestion(
                count=strong_breaks + 1,
                reason="Strong narrative breaks detected",
                confidence=STRONG_BREAK_CONFIDENCE,
            ))

        detailed = min(math.ceil(word_count / WORDS_PER_SHOT), MAX_SUGGESTED_SHOTS)
        if detailed > 0 and detailed != paragraph_count:
            suggestions.append(ShotSuggestion(
                count=detailed,
                reason=f"Detailed breakdown (~{WORDS_PER_SHOT} words per shot)",
                confidence=DETAILED_CONFIDENCE,
            ))

        return sorted(suggestions, key=lambda s: s.confidence, reverse=True)


def analyze_text(text: str, parsing_mode: str = DEFAULT_PARSING_MODE) -> TextChunker:
    return TextChunker(text, parsing_mode)
