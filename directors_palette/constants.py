"""All magic numbers and configuration constants."""

# Boundary detection
BOUNDARY_DEDUP_DISTANCE = 5         # chars, hybrid mode drops boundaries closer than this
CONTEXT_WINDOW_CHARS = 100          # chars of context scored on each side of punctuation
MAX_BOUNDARY_SCORE = 10
LINE_BASE_SCORE = 4                 # every usable line break
RHYME_BONUS = 1                     # last two letters of the line endings match
EMOTIONAL_TRANSITION_BONUS = 2      # only one of the two lines carries an emotion word
SECTION_TRANSITION_BONUS = 3        # either line names a song section marker
PUNCTUATION_BASE_SCORE = 2
PUNCTUATION_BONUS = {
    ".": 3,
    "!": 2,
    "?": 2,
    ",": 1,
    ";": 2,
    ":": 2,
}
DIALOGUE_EDGE_BONUS = 2             # quotation mark on exactly one side
PARAGRAPH_BREAK_BONUS = 3           # blank line right after the mark
INTRODUCTION_BONUS = 1              # "There was...", "At the...", "Anna was..."
EMOTION_WORDS = ("love", "hate", "fear", "joy", "pain", "hope", "dream", "nightmare")
SECTION_MARKERS = ("intro", "verse", "chorus", "hook", "bridge", "outro")

# Chunk generation
DEFAULT_PARSING_MODE = "hybrid"
PARSING_MODES = ("punctuation", "lines", "hybrid")
SINGLE_SHOT_SCORE = 10              # score reported when the whole text is one shot
FINAL_CHUNK_SCORE = 5               # score reported for the trailing chunk
DEFAULT_MIN_WORDS_PER_SHOT = 3
DEFAULT_MAX_WORDS_PER_SHOT = 200

# Recommended word ranges per content type
CONTENT_PRESETS = {
    "children_book": {"min_words_per_shot": 8, "max_words_per_shot": 50, "prefer_natural_breaks": True},
    "lyrics": {"min_words_per_shot": 4, "max_words_per_shot": 20, "prefer_natural_breaks": False},
    "story": {"min_words_per_shot": 15, "max_words_per_shot": 80, "prefer_natural_breaks": True},
    "commercial": {"min_words_per_shot": 10, "max_words_per_shot": 40, "prefer_natural_breaks": True},
}

# Shot count suggestions
HIGH_SCORE_THRESHOLD = 7
WORDS_PER_SHOT = 25
MAX_SUGGESTED_SHOTS = 20
PARAGRAPH_CONFIDENCE = 8
STRONG_BREAK_CONFIDENCE = 7
DETAILED_CONFIDENCE = 6
MIN_PARAGRAPHS_FOR_SUGGESTION = 3

# Export
EXPORT_FORMATS = ("text", "numbered", "json", "csv")
DEFAULT_EXPORT_FORMAT = "text"
DEFAULT_SEPARATOR = "\n"
CSV_HEADERS = ("Shot Number", "Description", "Chapter", "Section", "Director Style")
DEFAULT_ARTIST_TAG = "artist"
FORMAT_EXTENSIONS = {"json": "json", "csv": "csv"}  # anything else exports as .txt

OUTPUT_DIR = "output"
VERSION = "0.1.0"
