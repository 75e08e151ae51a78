"""Constants used throughout Gemini UI."""

from pathlib import Path


# Shared config file, also read and written by the Gemini CLI
GEMINI_CONFIG_FILE_NAME = ".gemini.json"
DEFAULT_GEMINI_CONFIG_PATH = Path.home() / GEMINI_CONFIG_FILE_NAME

# Environment variables
CONFIG_PATH_ENV_VAR = "GEMINI_CONFIG_PATH"
LOG_LEVEL_ENV_VAR = "LOG_LEVEL"

# Logging
DEFAULT_LOG_LEVEL = "info"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
