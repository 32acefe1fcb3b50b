from __future__ import annotations

import os
import re
import unicodedata
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Union
from urllib.parse import unquote_to_bytes

SEPARATORS = ("/", "\\")

# Characters rendered like a slash that some platforms fold into a real separator.
LOOKALIKE_SLASHES = frozenset({"\u2044", "\u2215", "\u2216", "\u29f8", "\ufe68", "\uff0f", "\uff3c"})

_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_SEPARATOR_SPLIT = re.compile(r"[/\\]")
_DRIVE_LETTER = re.compile(r"^[A-Za-z]:")
_URI_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")


class ReasonCode(str, Enum):
    TRAVERSAL_SEQUENCE = "traversal_sequence"
    ABSOLUTE_PATH_ATTEMPT = "absolute_path_attempt"
    EMPTY_SEGMENT = "empty_segment"
    INVALID_ENCODING = "invalid_encoding"


class PathSafetyError(ValueError):
    def __init__(self, reason: ReasonCode, message: str):
        super().__init__(message)
        self.reason = reason


@dataclass(frozen=True)
class SafePath:
    """Traversal-free relative path anchored under a designated root.

    ``str()`` yields the relative form with literal ``%`` re-escaped, which
    validates back to an equal instance. ``as_posix()`` is the plain decoded
    form and ``path`` is the absolute location under ``root``.
    """

    root: Path
    segments: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.root.is_absolute():
            raise ValueError("SafePath root must be absolute")
        if not self.segments:
            raise PathSafetyError(ReasonCode.EMPTY_SEGMENT, "Path must contain at least one segment")
        for segment in self.segments:
            if any(separator in segment for separator in SEPARATORS):
                raise PathSafetyError(ReasonCode.TRAVERSAL_SEQUENCE, "Segments must not contain separators")
            _check_decoded_text(segment)
        _check_segments(self.segments)
        _check_first_segment(self.segments[0])

    @property
    def relative(self) -> PurePosixPath:
        return PurePosixPath(*self.segments)

    @property
    def path(self) -> Path:
        return self.root.joinpath(*self.segments)

    def as_posix(self) -> str:
        return "/".join(self.segments)

    def __str__(self) -> str:
        return encode_segments(self.segments)

    def __fspath__(self) -> str:
        return os.fspath(self.path)


@dataclass(frozen=True)
class Safe:
    path: SafePath


@dataclass(frozen=True)
class Rejected:
    reason: ReasonCode
    message: str


ValidationOutcome = Union[Safe, Rejected]


def _check_decoded_text(text: str) -> None:
    for char in text:
        if unicodedata.category(char) == "Cc":
            raise PathSafetyError(ReasonCode.INVALID_ENCODING, "Control characters are not allowed")
        if char in LOOKALIKE_SLASHES:
            raise PathSafetyError(ReasonCode.INVALID_ENCODING, "Look-alike slash characters are not allowed")


def _check_segments(segments: tuple[str, ...]) -> None:
    if any(segment == "" for segment in segments):
        raise PathSafetyError(ReasonCode.EMPTY_SEGMENT, "Empty path segments are not allowed")
    if any(segment in {".", ".."} for segment in segments):
        raise PathSafetyError(ReasonCode.TRAVERSAL_SEQUENCE, "Path traversal is not allowed")
    if any(_DRIVE_LETTER.match(segment) for segment in segments):
        raise PathSafetyError(ReasonCode.ABSOLUTE_PATH_ATTEMPT, "Drive-qualified segments are not allowed")


def _check_first_segment(segment: str) -> None:
    if _URI_SCHEME.match(segment):
        raise PathSafetyError(ReasonCode.ABSOLUTE_PATH_ATTEMPT, "Path must be relative to the served root")
    if segment.startswith("~"):
        raise PathSafetyError(ReasonCode.ABSOLUTE_PATH_ATTEMPT, "Home expansion is not allowed")


def encode_segments(segments: tuple[str, ...]) -> str:
    return "/".join(segment.replace("%", "%25") for segment in segments)


def percent_decode(raw: str) -> str:
    if _MALFORMED_ESCAPE.search(raw):
        raise PathSafetyError(ReasonCode.INVALID_ENCODING, "Malformed percent-encoding")
    try:
        decoded = unquote_to_bytes(raw).decode("utf-8")
    except UnicodeError as exc:
        raise PathSafetyError(ReasonCode.INVALID_ENCODING, "Path is not valid UTF-8") from exc
    _check_decoded_text(decoded)
    return decoded


def parse_segments(raw: str) -> tuple[str, ...]:
    """Decode ``raw`` and split it into segments safe to join under any root.

    Rules apply in order and the first violation wins: encoding, emptiness,
    root indicators on the whole value, then per-segment emptiness,
    dot segments and drive prefixes.
    """
    decoded = percent_decode(raw)
    if decoded == "":
        raise PathSafetyError(ReasonCode.EMPTY_SEGMENT, "Path must not be empty")

    # A leading separator is a root indicator, not an empty segment.
    if decoded.startswith(SEPARATORS):
        raise PathSafetyError(ReasonCode.ABSOLUTE_PATH_ATTEMPT, "Path must be relative to the served root")
    _check_first_segment(_SEPARATOR_SPLIT.split(decoded, maxsplit=1)[0])

    segments = tuple(_SEPARATOR_SPLIT.split(decoded))
    _check_segments(segments)
    return segments


def normalize_root(root: Path | str) -> Path:
    normalized = Path(os.path.normpath(os.fspath(root)))
    if not normalized.is_absolute():
        raise ValueError("Designated root must be an absolute path")
    return normalized


def join_under_root(root: Path | str, segments: tuple[str, ...]) -> SafePath:
    root_path = normalize_root(root)
    candidate = Path(os.path.normpath(os.path.join(root_path, *segments)))
    if root_path not in candidate.parents:
        raise PathSafetyError(ReasonCode.TRAVERSAL_SEQUENCE, "Path escapes the served root")
    return SafePath(root=root_path, segments=segments)


def validate_relative_path(raw: str, root: Path | str) -> SafePath:
    return join_under_root(root, parse_segments(raw))


def validate(raw: str, root: Path | str) -> ValidationOutcome:
    try:
        return Safe(validate_relative_path(raw, root))
    except PathSafetyError as exc:
        return Rejected(reason=exc.reason, message=str(exc))


def resolve_under_root(root: Path | str, raw: str) -> Path:
    """Like ``validate_relative_path`` but also follows symlinks on disk."""
    safe_path = validate_relative_path(raw, root)
    root_real = safe_path.root.resolve(strict=False)
    candidate = safe_path.path.resolve(strict=False)

    if root_real in candidate.parents:
        return candidate

    raise PathSafetyError(ReasonCode.TRAVERSAL_SEQUENCE, "Path escapes the served root")
