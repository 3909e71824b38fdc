import os
from dotenv import load_dotenv

# Load .env from project root
load_dotenv()

DEFAULT_LAYOUT_ENGINE = os.getenv("C4VIEW_DEFAULT_LAYOUT_ENGINE", "dagre")

FIT_PADDING = int(os.getenv("C4VIEW_FIT_PADDING", "80"))
PRESET_PADDING = int(os.getenv("C4VIEW_PRESET_PADDING", "50"))

# Surface handshake (seconds)
SURFACE_WAIT_TIMEOUT = float(os.getenv("C4VIEW_SURFACE_WAIT_TIMEOUT", "2.0"))
SURFACE_POLL_INTERVAL = float(os.getenv("C4VIEW_SURFACE_POLL_INTERVAL", "0.05"))
FIT_RETRY_ATTEMPTS = int(os.getenv("C4VIEW_FIT_RETRY_ATTEMPTS", "5"))
FIT_RETRY_DELAY = float(os.getenv("C4VIEW_FIT_RETRY_DELAY", "0.1"))

DIM_OPACITY = float(os.getenv("C4VIEW_DIM_OPACITY", "0.25"))

LOG_LEVEL = os.getenv("C4VIEW_LOG_LEVEL", "INFO")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("C4VIEW_CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]
