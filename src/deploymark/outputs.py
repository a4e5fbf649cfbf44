"""Named step outputs handed back to the invoking pipeline."""

from __future__ import annotations

import sys
import uuid
from collections.abc import Mapping
from pathlib import Path
from typing import TextIO


def format_output(key: str, value: str) -> str:
    """Format one output in the ``key=value`` file syntax.

    Multi-line values use the ``key<<DELIMITER`` block form.
    """
    if "\n" not in value and "\r" not in value:
        return f"{key}={value}\n"
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    return f"{key}<<{delimiter}\n{value}\n{delimiter}\n"


def write_outputs(
    outputs: Mapping[str, str],
    path: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """Append *outputs* to the file at *path*, or print them to *stream*."""
    text = "".join(format_output(key, value) for key, value in outputs.items())
    if path:
        with Path(path).open("a", encoding="utf-8") as fh:
            fh.write(text)
        return
    (stream or sys.stdout).write(text)
