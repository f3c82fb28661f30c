"""Per-call decode state."""

from __future__ import annotations

from dataclasses import dataclass, field

from transit_feed.config import DecoderConfig
from transit_feed.errors import FieldDecodeError, format_path
from transit_feed.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ContainedFailure:
    """A nested block that failed to decode and was replaced by its default."""

    wrapper: str
    path: str
    error_type: str
    reason: str


@dataclass
class DecodeContext:
    """Configuration and diagnostics for one decode call.

    Decoder definitions are shared between calls; everything that changes
    while decoding lives here.
    """

    config: DecoderConfig = field(default_factory=DecoderConfig)
    diagnostics: list[ContainedFailure] = field(default_factory=list)
    path: list[str] = field(default_factory=list)

    @property
    def location(self) -> str:
        return format_path(self.path)

    def record_contained(self, wrapper: str, exc: FieldDecodeError) -> None:
        failure = ContainedFailure(
            wrapper=wrapper,
            path=self.location,
            error_type=type(exc).__name__,
            reason=str(exc),
        )
        self.diagnostics.append(failure)
        logger.debug(
            "Contained decode failure",
            wrapper=wrapper,
            path=failure.path,
            error_type=failure.error_type,
            reason=failure.reason,
        )
