"""
Project-wide constants for the content assistant
"""  # noqa: D200, D212, D415

# ==============================================================================
# Generation
# ==============================================================================

DEFAULT_MODEL = "gemini-1.5-flash"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_OUTPUT_TOKENS = 2048

# Accepted temperature range; values outside fall back to the default
MIN_TEMPERATURE = 0.0
MAX_TEMPERATURE = 2.0

RESPONSE_MIME_TYPE = "application/json"
DEFAULT_SAFETY_THRESHOLD = "BLOCK_MEDIUM_AND_ABOVE"
SAFETY_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)
SAFETY_THRESHOLDS = (
    "BLOCK_LOW_AND_ABOVE",
    "BLOCK_MEDIUM_AND_ABOVE",
    "BLOCK_ONLY_HIGH",
    "BLOCK_NONE",
)

# ==============================================================================
# Analysis result
# ==============================================================================

NO_ACTION_ITEMS = "None identified."
NO_NEXT_STEPS = "No further suggestions."

# ==============================================================================
# Timeouts (seconds)
# ==============================================================================

FETCH_TIMEOUT = 10.0  # fast-path HTTP GET
RENDER_TIMEOUT = 60.0  # headless browser navigation
PARSE_TIMEOUT = 30.0  # PDF/DOCX text extraction
CHUNK_TIMEOUT = 60.0  # wait for the next model fragment
HISTORY_TIMEOUT = 10.0  # history sink write

# ==============================================================================
# Scraping
# ==============================================================================

MIN_CONTENT_CHARS = 200  # below this the fast path escalates
MAX_URL_CHARS = 15_000  # scraped text is truncated to this bound

STATIC_NOISE_TAGS = ("script", "style", "nav", "footer", "header", "aside")
RENDERED_NOISE_TAGS = (*STATIC_NOISE_TAGS, "form", "button")
CONTENT_PREFERENCE = ("article", "main", "body")

USER_AGENT = "Mozilla/5.0 (compatible; content-assistant/0.1)"

# ==============================================================================
# Documents
# ==============================================================================

PARSE_WORKERS = 4  # threads reserved for PDF/DOCX extraction

PDF_MIME_TYPE = "application/pdf"
DOCX_MIME_TYPE = (
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
)

# ==============================================================================
# History
# ==============================================================================

DEFAULT_HISTORY_LIMIT = 5
IMAGE_INPUT_DESCRIPTOR = "Image Input"
