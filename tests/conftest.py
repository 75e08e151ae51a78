import asyncio
import sys

import pytest
from click.testing import CliRunner


@pytest.fixture
def cli_runner():
    """Provides a Click CLI runner for testing commands."""
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    """Path of a Gemini config file that does not exist yet."""
    return tmp_path / "home" / ".gemini.json"


@pytest.fixture(autouse=True)
def isolated_gemini_config(monkeypatch, config_file):
    """Point every test at a temporary Gemini config file."""
    monkeypatch.setenv("GEMINI_CONFIG_PATH", str(config_file))
    return config_file


@pytest.fixture
def run():
    """Run a coroutine to completion on a fresh event loop."""
    return asyncio.run


@pytest.fixture
def sleeper():
    """Command/args for a stdio server that stays up until signalled."""
    return {
        "command": sys.executable,
        "args": ["-c", "import time; time.sleep(60)"],
    }


@pytest.fixture
def sample_document():
    """A config document with global and project servers and foreign keys."""
    return {
        "theme": "Default",
        "mcpServers": {
            "fs": {
                "transport": "stdio",
                "command": "npx",
                "args": ["-y", "@modelcontextprotocol/server-filesystem"],
                "enabled": True,
            },
            "docs": {"transport": "http", "url": "https://mcp.example.com"},
        },
        "geminiProjects": {
            "/src/app": {
                "trusted": True,
                "mcpServers": {
                    "fs": {
                        "transport": "stdio",
                        "command": "node",
                        "args": ["server.js"],
                        "env": {"ROOT": "/src/app"},
                        "enabled": False,
                    }
                },
            }
        },
    }
