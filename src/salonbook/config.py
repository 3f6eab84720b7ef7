"""Runtime configuration resolved from environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

# Form definitions shipped with the package
BUNDLED_FORMS_PATH = Path(__file__).parent / "forms" / "definitions"


@dataclass
class FormsConfig:
    """Where form definitions live and how verbosely to log."""

    forms_path: Path
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> FormsConfig:
        """Create config from environment variables.

        Resolution order for the forms directory:
        1. SALONBOOK_FORMS_PATH env var
        2. Default: the bundled definitions directory

        SALONBOOK_LOG_LEVEL sets the log level (default: WARNING).
        """
        forms_path = os.environ.get("SALONBOOK_FORMS_PATH")
        log_level = os.environ.get("SALONBOOK_LOG_LEVEL", "WARNING").upper()
        return cls(
            forms_path=Path(forms_path) if forms_path else BUNDLED_FORMS_PATH,
            log_level=log_level,
        )

    @property
    def is_bundled(self) -> bool:
        return self.forms_path == BUNDLED_FORMS_PATH

    def configure_logging(self, verbose: bool = False) -> None:
        """Configure root logging for command-line use."""
        level = logging.DEBUG if verbose else logging.getLevelName(self.log_level)
        if not isinstance(level, int):
            level = logging.WARNING
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
