"""
Configuration for the behavior extractor.
"""

from dataclasses import dataclass, field
from pathlib import Path

from .models import UseCase


@dataclass
class ExtractorConfig:
    """Configuration for the behavior extractor."""

    # Database
    db_path: Path = field(default_factory=lambda: Path("behavior_extractor/db/sessions.db"))

    # Use cases seeded as vertices into every model (e.g. from a template)
    default_use_cases: list[UseCase] = field(default_factory=list)

    # Diagnostics
    log_negative_time_ranges: bool = True

    # API limits
    max_sessions_per_request: int = 1000

    def __post_init__(self):
        """Ensure db_path parent directories exist."""
        if isinstance(self.db_path, str):
            self.db_path = Path(self.db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
