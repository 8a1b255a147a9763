"""Bot Typist — stream LLM replies into typed notebook cells."""

__version__ = "0.4.0"
