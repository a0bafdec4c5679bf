"""AI meeting transcript summarizer service."""

__version__ = "0.1.0"
