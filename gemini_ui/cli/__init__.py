"""Command line interface for Gemini UI."""
