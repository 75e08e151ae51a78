"""Access to the shared Gemini config file."""

import json
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Any, Dict

from pydantic import ValidationError

from ..models.mcp import MCPConfigDocument
from .exceptions import ConfigParseError

logger = logging.getLogger(__name__)


class ConfigStore:
    """Loads and saves ``~/.gemini.json``.

    The file is shared with the Gemini CLI, which may rewrite it at any time.
    Nothing is cached here: callers load immediately before they save, and a
    save always replaces the whole document. There is no lock the CLI would
    honour, so the last writer wins.
    """

    def __init__(self, config_file: Path):
        """Initialize config store with the config file path."""
        self.config_file = Path(config_file)

    def load_raw(self) -> Dict[str, Any]:
        """Read the file as a plain JSON object.

        A missing file reads as ``{}`` and is not created. An existing file
        that is empty is an error: it may be mid-write by another process.
        """
        try:
            content = self.config_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}

        if not content.strip():
            raise ConfigParseError(self.config_file, "empty file")

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigParseError(self.config_file, str(e)) from e

        if not isinstance(data, dict):
            raise ConfigParseError(
                self.config_file, f"expected a JSON object, got {type(data).__name__}"
            )
        return data

    def load(self) -> MCPConfigDocument:
        """Load the MCP sections of the config file."""
        data = self.load_raw()
        try:
            return MCPConfigDocument.model_validate(data)
        except ValidationError as e:
            raise ConfigParseError(self.config_file, str(e)) from e

    def save(self, document: MCPConfigDocument) -> None:
        """Replace the config file with ``document``.

        Written to a sibling temp file and moved into place so a concurrent
        reader sees either the old or the new document, never a partial one.
        """
        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(document.to_json_dict(), indent=2) + "\n"

        fd, tmp_name = tempfile.mkstemp(
            dir=self.config_file.parent, prefix=f".{self.config_file.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            if self.config_file.exists():
                os.chmod(tmp_name, stat.S_IMODE(self.config_file.stat().st_mode))
            os.replace(tmp_name, self.config_file)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug(f"Saved MCP config to {self.config_file}")
