"""Domain entities for Kwik link resolution.

Pure value objects with no framework dependencies and no I/O.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from .errors import NetworkError

HeaderValue = Union[str, list[str]]


@dataclass(frozen=True)
class ObfuscationParameters:
    """The four values a page embeds to hide a link.

    ``alphabet[radix]`` is the segment separator, so ``alphabet`` is always
    longer than ``radix``.
    """

    cipher_text: str
    alphabet: str
    offset: int
    radix: int


@dataclass(frozen=True)
class FetchResult:
    """Immutable snapshot of one HTTP exchange.

    Header names are lower-cased.  Headers sent more than once by the server
    (``set-cookie`` in practice) are stored as a list.
    """

    body: str
    status_code: int
    headers: Mapping[str, HeaderValue] = field(default_factory=dict)
    url: str = ""

    def header_values(self, name: str) -> list[str]:
        value = self.headers.get(name.lower())
        if value is None:
            return []
        if isinstance(value, list):
            return list(value)
        return [value]

    def header(self, name: str) -> str | None:
        """Return the first value of header *name*, or ``None``."""
        values = self.header_values(name)
        return values[0] if values else None

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status_code < 400

    @property
    def location(self) -> str | None:
        return self.header("location")

    def raise_for_status(self) -> None:
        """Raise ``NetworkError`` unless the status is 2xx."""
        if not 200 <= self.status_code < 300:
            raise NetworkError(
                f"HTTP {self.status_code} from {self.url or 'upstream'}",
                status_code=self.status_code,
            )


@dataclass(frozen=True)
class DirectLink:
    """A plain target link found on the page."""

    url: str


@dataclass(frozen=True)
class ObfuscatedLink:
    """Obfuscation parameters found on the page instead of a plain link."""

    params: ObfuscationParameters


@dataclass(frozen=True)
class NotFound:
    """Neither a link nor obfuscation parameters were found."""


ExtractionOutcome = Union[DirectLink, ObfuscatedLink, NotFound]


@dataclass(frozen=True)
class PipelineResult:
    """Terminal value of one resolution.

    Either ``error`` is set (``success=False``) or ``success=True`` and the
    link fields are populated.
    """

    success: bool
    final_link: str | None = None
    intermediate_link: str | None = None
    message: str | None = None
    warning: str | None = None
    error: str | None = None

    @classmethod
    def failure(cls, error: str) -> PipelineResult:
        return cls(success=False, error=error)

    @property
    def is_partial(self) -> bool:
        """True when only the intermediate link could be obtained."""
        return (
            self.success
            and self.final_link is not None
            and self.final_link == self.intermediate_link
        )

    def to_dict(self) -> dict[str, Any]:
        """Render the JSON shape consumed by the front-end."""
        if not self.success:
            return {"success": False, "error": self.error or "Unknown error"}

        data: dict[str, Any] = {
            "success": True,
            "directLink": self.final_link,
            "finalLink": self.final_link,
            "intermediateLink": self.intermediate_link,
            "message": self.message,
        }
        if self.warning:
            data["warning"] = self.warning
        return data
