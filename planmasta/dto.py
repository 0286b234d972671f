"""Request objects accepted by the HTTP API."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping


class Quality(str, Enum):
    """Requested image quality."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def _coerce_quality(value: str) -> Quality | str:
    try:
        return Quality(value)
    except ValueError:
        return value


@dataclass
class GenerateRequest:
    """Body of an image generation request.

    ``quality`` holds a :class:`Quality` when the value is known and the raw
    string otherwise; unknown values are accepted as they are.
    """

    quality: Quality | str = ""
    prompt: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "GenerateRequest":
        """Build a request from decoded JSON.

        Keys match field names case-insensitively, unknown keys are ignored,
        missing or null fields become empty strings. Raises ``ValueError``
        when the data is not an object or a field is not a string.
        """
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ValueError(
                f"cannot decode {type(data).__name__} into GenerateRequest"
            )

        fields = {"quality": "", "prompt": ""}
        for key, value in data.items():
            name = str(key).lower()
            if name not in fields:
                continue
            if value is None:
                continue
            if not isinstance(value, str):
                raise ValueError(
                    f"cannot decode {type(value).__name__} into field "
                    f"GenerateRequest.{name} of type string"
                )
            fields[name] = value

        return cls(quality=_coerce_quality(fields["quality"]), prompt=fields["prompt"])

    def to_dict(self) -> dict[str, str]:
        """Return the JSON-ready form of the request."""
        quality = self.quality.value if isinstance(self.quality, Quality) else self.quality
        return {"quality": quality, "prompt": self.prompt}