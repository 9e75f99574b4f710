"""Global pytest configuration."""

import os

# Force the deterministic LLM stub and in-memory storage before any imports
os.environ["OPENAI_API_KEY"] = ""
os.environ.pop("STORAGE_PATH", None)
