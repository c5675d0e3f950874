import os
from pathlib import Path
from dotenv import load_dotenv

from .constants import DEFAULT_LOG_LEVEL, LOG_FORMAT_TEXT

# Load Environment
project_root = Path(__file__).resolve().parent.parent.parent
env_path_local = project_root / ".env.local"
env_path_main = project_root / ".env"

if env_path_local.exists():
    load_dotenv(dotenv_path=env_path_local)
elif env_path_main.exists():
    load_dotenv(dotenv_path=env_path_main)
else:
    load_dotenv()

CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS", "http://localhost:3000,http://localhost:3001,http://localhost:5173"
)

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL)
LOG_FORMAT = os.getenv("LOG_FORMAT", LOG_FORMAT_TEXT)

# Simulation runtime
# Per-step pause for demos; 0 emits progress as fast as the loop runs.
SIMULATION_STEP_DELAY_MS = int(os.getenv("SIMULATION_STEP_DELAY_MS", "0"))
MAX_YEARS_TO_SIMULATE = int(os.getenv("MAX_YEARS_TO_SIMULATE", "100"))

# Realtime fan-out
SUBSCRIBER_QUEUE_SIZE = int(os.getenv("SUBSCRIBER_QUEUE_SIZE", "1000"))
