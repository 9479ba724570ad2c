"""CircleCI environment variable type definitions."""

from dataclasses import dataclass
from typing import Any, Literal

VcsType = Literal["github", "bitbucket"]

VCS_TYPES: tuple[str, ...] = ("github", "bitbucket")


@dataclass
class EnvironmentVariable:
    """Project environment variable.

    Values returned by a listing are obfuscated by CircleCI: four ``x``
    characters followed by the last four characters of the real value.
    """

    key: str
    value: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EnvironmentVariable":
        key = data["name"]
        value = data["value"]
        if not isinstance(key, str) or not isinstance(value, str):
            raise TypeError("name and value must be strings")
        return cls(key=key, value=value)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.key, "value": self.value}
