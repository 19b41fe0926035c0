"""Parser for the text printed by `godot4 --version`.

Godot prints versions such as:

    4.1.2.stable.official.4e8a5ad8b
    4.2.dev3.custom_build.6a9f6f2fe
    4.0.stable.mono

Some builds emit log noise before the version line, so the last line that
parses wins.
"""

import re
from typing import NamedTuple


class GodotVersion(NamedTuple):
    major: int
    minor: int
    patch: int
    status: str
    custom_rev: str | None
    full_string: str

    def __str__(self) -> str:
        return self.full_string


_VERSION_RE = re.compile(
    r"^(?P<major>\d+)\.(?P<minor>\d+)(?:\.(?P<patch>\d+))?"
    r"(?:\.(?P<status>[a-z]+[0-9]*))?"
    r"(?:\.(?P<rest>[A-Za-z0-9_.\-]+))?$"
)


def parse_godot_version(text: str) -> GodotVersion:
    for line in reversed(text.strip().splitlines()):
        line = line.strip()
        match = _VERSION_RE.match(line)
        if match is None:
            continue
        return GodotVersion(
            major=int(match["major"]),
            minor=int(match["minor"]),
            patch=int(match["patch"] or 0),
            status=match["status"] or "",
            custom_rev=match["rest"],
            full_string=line,
        )
    raise ValueError(f"not a Godot version string: {text.strip()!r}")
