"""Typed view of sites.yaml."""

from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, model_validator

from extractor.config.exceptions import ConfigurationError
from extractor.domain.models import SiteKind
from extractor.pages.dom import validate_selectors

from . import SITES_FILE, read_rules_file


class HostTable(BaseModel):
    """Host substrings per site family."""

    greenhouse_boards: List[str] = Field(..., min_length=1)
    greenhouse_frames: List[str] = Field(..., min_length=1)
    wellfound: List[str] = Field(default_factory=list)
    remote_rocketship: List[str] = Field(default_factory=list)
    linkedin: List[str] = Field(default_factory=list)

    def kind_for_host(self, host: str) -> Optional[SiteKind]:
        """Site kind whose host substring occurs in host, checked in table order."""
        host = host.lower()
        for kind, substrings in (
            (SiteKind.WELLFOUND, self.wellfound),
            (SiteKind.REMOTE_ROCKETSHIP, self.remote_rocketship),
            (SiteKind.LINKEDIN, self.linkedin),
        ):
            if any(s.lower() in host for s in substrings):
                return kind
        return None

    def is_board_host(self, host: str) -> bool:
        return host.lower() in {h.lower() for h in self.greenhouse_boards}

    def is_frame_host(self, host: str) -> bool:
        host = host.lower()
        return any(host == h or host.endswith("." + h) for h in self.greenhouse_frames)


class StructuredTable(BaseModel):
    """Ordered selector lists for each field of a structured page."""

    title: List[str] = Field(default_factory=list)
    compensation: List[str] = Field(default_factory=list)
    location: List[str] = Field(default_factory=list)
    description: List[str] = Field(..., min_length=1)
    noise: List[str] = Field(default_factory=list, description="Extra site-specific noise")


class GenericTable(BaseModel):
    region_selectors: List[str] = Field(..., min_length=1)


class SiteTables(BaseModel):
    """All site data used by the classifier and the scraping strategies."""

    hosts: HostTable
    noise_selectors: List[str] = Field(default_factory=list)
    main_content_selectors: List[str] = Field(default_factory=lambda: ["main", "body"])
    structured: Dict[str, StructuredTable] = Field(default_factory=dict)
    markers: Dict[str, List[str]] = Field(default_factory=dict)
    generic: GenericTable

    @model_validator(mode="after")
    def check_selectors(self):
        selectors = list(self.noise_selectors) + list(self.main_content_selectors)
        selectors += self.generic.region_selectors
        for table in self.structured.values():
            selectors += table.title + table.compensation + table.location
            selectors += table.description + table.noise

        errors = validate_selectors(selectors)
        if errors:
            raise ValueError("Invalid CSS selector(s): " + "; ".join(errors))
        return self

    def structured_for(self, kind: SiteKind) -> Optional[StructuredTable]:
        return self.structured.get(getattr(kind, "value", kind))

    def markers_for(self, kind: SiteKind) -> List[str]:
        return list(self.markers.get(getattr(kind, "value", kind), []))


def load_site_tables(override_dir: Optional[Path] = None) -> SiteTables:
    """
    Load sites.yaml, from override_dir when it provides one.

    Raises:
        ConfigurationError: If the table is unreadable or fails validation
    """
    data = read_rules_file(SITES_FILE, override_dir)
    try:
        return SiteTables.model_validate(data)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(loc) for loc in error['loc']) or 'sites'}: {error['msg']}"
            for error in e.errors()
        ]
        raise ConfigurationError("Site rule table is invalid", errors=errors) from e


@lru_cache(maxsize=1)
def default_site_tables() -> SiteTables:
    """Bundled site tables, parsed once per process."""
    return load_site_tables()
