"""Load runtime configuration from the environment and an optional .env file.

Variables already present in the environment take precedence over .env.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional, Tuple

from dotenv import load_dotenv

ENV_FILE = ".env"


@dataclass(frozen=True)
class Settings:
    back_url: Optional[str] = None
    task_id: str = ""
    timeout: float = 30.0
    verify_tls: bool = True
    follow_redirects: bool = True
    verbose: int = 1

    @property
    def machine_mode(self) -> bool:
        """BACK_URL switches error output to JSON and results to the backend."""
        return bool(self.back_url)


def _as_bool(raw: Optional[str], default: bool) -> bool:
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def settings_from_env(env: Mapping[str, str], warnings: Optional[List[str]] = None) -> Settings:
    warnings = warnings if warnings is not None else []

    timeout = 30.0
    if env.get("SCANNER_TIMEOUT"):
        try:
            timeout = float(env["SCANNER_TIMEOUT"])
            if timeout <= 0:
                raise ValueError(timeout)
        except ValueError:
            warnings.append(f"SCANNER_TIMEOUT={env['SCANNER_TIMEOUT']!r} is not a positive number, using 30")
            timeout = 30.0

    verbose = 1
    if env.get("SCANNER_VERBOSE"):
        try:
            verbose = int(env["SCANNER_VERBOSE"])
        except ValueError:
            warnings.append(f"SCANNER_VERBOSE={env['SCANNER_VERBOSE']!r} is not an integer, using 1")

    return Settings(
        back_url=env.get("BACK_URL") or None,
        task_id=env.get("TASK_ID", ""),
        timeout=timeout,
        verify_tls=_as_bool(env.get("SCANNER_VERIFY_TLS"), True),
        follow_redirects=_as_bool(env.get("SCANNER_FOLLOW_REDIRECTS"), True),
        verbose=verbose,
    )


def load_settings(env_file: str = ENV_FILE) -> Tuple[Settings, bool, List[str]]:
    """Returns (settings, whether the .env file was found, warnings)."""
    path = Path(env_file)
    found = path.is_file()
    if found:
        load_dotenv(path, override=False)
    warnings: List[str] = []
    return settings_from_env(os.environ, warnings), found, warnings
