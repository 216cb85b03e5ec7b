"""Machine-readable result markers printed by automation scripts.

Format, one marker per line, anywhere in the output:

    NIGHT_WATCH_RESULT:<status>|key=value|key=value

The last marker in the output is the script's final status.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType

logger = logging.getLogger("app.script_results")

RESULT_PREFIX = "NIGHT_WATCH_RESULT:"


class ResultOutcome(StrEnum):
    SUCCESS = "success"
    SKIP = "skip"
    FAILURE = "failure"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ScriptResult:
    status: str
    data: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not self.status:
            raise ValueError("ScriptResult status must not be empty")
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    def __hash__(self):
        return hash((self.status, tuple(sorted(self.data.items()))))

    @property
    def outcome(self) -> ResultOutcome:
        """Coarse outcome from the status prefix: success_open_pr -> SUCCESS, skip_locked -> SKIP."""
        head = self.status.split("_", 1)[0].lower()
        try:
            return ResultOutcome(head)
        except ValueError:
            return ResultOutcome.UNKNOWN

    def to_dict(self) -> dict:
        return {"status": self.status, "data": dict(self.data)}


def _parse_marker_line(line: str) -> ScriptResult | None:
    payload = line[len(RESULT_PREFIX):].strip()
    status_raw, *parts = payload.split("|")
    status = status_raw.strip()
    if not status:
        return None

    data: dict[str, str] = {}
    for part in parts:
        key, sep, value = part.strip().partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        data[key] = value.strip()
    return ScriptResult(status=status, data=data)


def parse_script_result(output: str | bytes | None) -> ScriptResult | None:
    """Return the last result marker in ``output``, or None when there is none."""
    if isinstance(output, bytes):
        output = output.decode("utf-8", errors="replace")
    if not output or not output.strip():
        return None

    lines = re.split(r"\r?\n", output)
    for line in reversed(lines):
        line = line.strip()
        if not line.startswith(RESULT_PREFIX):
            continue
        result = _parse_marker_line(line)
        if result is None:
            logger.debug(f"Ignoring result marker without status: {line[:200]!r}")
            continue
        logger.debug(f"Script result: status={result.status} data={dict(result.data)}")
        return result
    return None


def _check_field(kind: str, value: str, forbidden: str) -> None:
    if not value:
        raise ValueError(f"Result marker {kind} must not be empty")
    if value != value.strip():
        raise ValueError(f"Result marker {kind} has surrounding whitespace: {value!r}")
    bad = [c for c in forbidden if c in value]
    if bad:
        raise ValueError(f"Result marker {kind} contains {bad[0]!r}: {value!r}")


def format_result_marker(status: str, data: Mapping[str, str] | None = None) -> str:
    """Build the marker line a script prints to report ``status`` and ``data``.

    Raises ValueError for anything parse_script_result could not read back unchanged.
    """
    _check_field("status", status, "|\r\n")
    segments = [f"{RESULT_PREFIX}{status}"]
    for key, value in (data or {}).items():
        _check_field("key", key, "|=\r\n")
        if value and value != value.strip():
            raise ValueError(f"Result marker value for {key!r} has surrounding whitespace")
        if any(c in value for c in "|\r\n"):
            raise ValueError(f"Result marker value for {key!r} contains '|' or a newline")
        segments.append(f"{key}={value}")
    return "|".join(segments)
