import os
from dotenv import load_dotenv

load_dotenv()

# Gemini (primary text provider)
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_BASE_URL = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta/models")

# Ollama (local fallback)
OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "llama3.1:8b")
USE_OLLAMA_FALLBACK = os.getenv("USE_OLLAMA_FALLBACK", "true").lower() == "true"

LLM_TIMEOUT = int(os.getenv("LLM_TIMEOUT", "60"))  # seconds
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.7"))

# Retry with exponential backoff (transient errors only)
RETRY_ATTEMPTS = int(os.getenv("RETRY_ATTEMPTS", "3"))  # retries after the first call
RETRY_INITIAL_DELAY = float(os.getenv("RETRY_INITIAL_DELAY", "2.0"))  # seconds, doubles each retry

# Storyboard segmentation
SEGMENT_BATCH_SIZE = int(os.getenv("SEGMENT_BATCH_SIZE", "5"))
MIN_UNCONSUMED_CHARS = 5  # below this the remainder is whitespace/noise
END_TOLERANCE_CHARS = 10  # cursor this close to the end counts as finished
EXCERPT_MIN_WORDS = 15
EXCERPT_MAX_WORDS = 25
DEFAULT_SCENE_DURATION = 6  # seconds, middle of the 4-8s speech range

# Idea generation
IDEA_COUNT = 5
REFERENCE_SCRIPT_MIN_CHARS = 10
REFERENCE_SCRIPT_IDEA_CHARS = 2000

# Output directories
OUTPUT_DIR = os.getenv("OUTPUT_DIR", "output")
