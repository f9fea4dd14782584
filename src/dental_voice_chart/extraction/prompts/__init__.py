"""
Chart Extraction Prompts

Versioned instruction templates describing the chart-operation output
contract. A template is never edited in place: a contract change ships as a
new version file and PROMPT_VERSION moves to it.

Copyright (c) 2024 Cleansheet LLC
License: CC BY 4.0
"""

from pathlib import Path

PROMPTS_DIR = Path(__file__).parent

PROMPT_VERSION = "v1"

AVAILABLE_VERSIONS = [
    "v1",
]


def get_prompt_path(version: str = PROMPT_VERSION) -> Path:
    """Get the path to a prompt version's template file."""
    return PROMPTS_DIR / f"dental_chart_{version}.txt"


def load_prompt(version: str = PROMPT_VERSION) -> str:
    """Load a prompt template."""
    path = get_prompt_path(version)
    if version not in AVAILABLE_VERSIONS or not path.exists():
        raise ValueError(f"Unknown prompt version: {version}. Available: {AVAILABLE_VERSIONS}")
    return path.read_text(encoding="utf-8")


def list_versions() -> list[str]:
    """List available prompt versions."""
    return AVAILABLE_VERSIONS.copy()
