"""URL -> SiteIdentity classification."""

from .classifier import classify, resolve_board_token

__all__ = ["classify", "resolve_board_token"]
