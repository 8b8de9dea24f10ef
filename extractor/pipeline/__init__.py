"""Request orchestration: classification, API shortcut, scraping fan-out, delivery."""

from .models import ExtractionRequest, ExtractionRunResult
from .runner import ExtractionPipeline

__all__ = ["ExtractionPipeline", "ExtractionRequest", "ExtractionRunResult"]
