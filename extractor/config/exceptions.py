"""Configuration errors."""

from pathlib import Path
from typing import List, Optional, Union

from extractor.exceptions import ExtractorError


class ConfigurationError(ExtractorError):
    """
    A configuration file, rule table or environment variable is unusable.

    The rendered message lists every problem found, numbered, followed by
    hints for fixing them and the file they came from.

    Attributes:
        message: Headline without the error list
        errors: Individual problems (one per invalid field)
        suggestions: Hints shown under the error list
        source: File the problems were found in, when there is one
    """

    def __init__(
        self,
        message: str,
        errors: Optional[List[str]] = None,
        suggestions: Optional[List[str]] = None,
        source: Optional[Union[str, Path]] = None,
    ):
        self.message = message
        self.errors = list(errors or [])
        self.suggestions = list(suggestions or [])
        self.source = str(source) if source is not None else None
        super().__init__(self.render())

    def render(self) -> str:
        lines = [self.message]
        if self.source:
            lines.append(f"  (in {self.source})")

        if self.errors:
            lines.append("\nValidation Errors:")
            lines.extend(f"  {number}. {error}" for number, error in enumerate(self.errors, 1))

        if self.suggestions:
            lines.append("\nSuggestions:")
            lines.extend(f"  - {hint}" for hint in self.suggestions)

        return "\n".join(lines)
