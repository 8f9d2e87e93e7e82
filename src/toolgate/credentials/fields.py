"""
Auth field model.

An ``AuthFieldGroup`` is one logical secret that may be known under several
names, e.g. ``BRAVE_API_KEY||BRAVE_SEARCH_API_KEY``. Any alias satisfies the
group; writes go to every alias. The first alias is the primary field and is
the name the resolved value is handed to a tool under.

An ``AuthRequirement`` is the ordered list of groups a tool needs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Union

ALIAS_DELIMITER = "||"


@dataclass(frozen=True)
class AuthFieldGroup:
    """Ordered, non-empty set of interchangeable field names."""

    aliases: tuple[str, ...]

    def __post_init__(self):
        if isinstance(self.aliases, str):
            raise TypeError(
                f"AuthFieldGroup takes a tuple of names, got {self.aliases!r}; "
                "use AuthFieldGroup.parse() for joined strings"
            )
        cleaned = tuple(a.strip() for a in self.aliases if a and a.strip())
        if not cleaned:
            raise ValueError("AuthFieldGroup needs at least one field name")
        # dedupe, keeping declared order
        object.__setattr__(self, "aliases", tuple(dict.fromkeys(cleaned)))

    @classmethod
    def parse(cls, value: FieldLike) -> AuthFieldGroup:
        """Accept a group, a ``||``-joined string, or a sequence of names."""
        if isinstance(value, AuthFieldGroup):
            return value
        if isinstance(value, str):
            return cls(tuple(value.split(ALIAS_DELIMITER)))
        return cls(tuple(value))

    @property
    def primary(self) -> str:
        return self.aliases[0]

    def __iter__(self) -> Iterator[str]:
        return iter(self.aliases)

    def __len__(self) -> int:
        return len(self.aliases)

    def __str__(self) -> str:
        return ALIAS_DELIMITER.join(self.aliases)


FieldLike = Union[AuthFieldGroup, str, Iterable[str]]


@dataclass(frozen=True)
class AuthRequirement:
    """A tool's full credential contract. Empty means no auth needed."""

    groups: tuple[AuthFieldGroup, ...] = ()

    @classmethod
    def of(cls, *fields: FieldLike) -> AuthRequirement:
        return cls(tuple(AuthFieldGroup.parse(f) for f in fields))

    @classmethod
    def from_auth_config(cls, auth_config: Iterable[dict]) -> AuthRequirement:
        """Build from manifest ``authConfig`` entries (``{"authField": ...}``)."""
        return cls.of(*(entry["authField"] for entry in auth_config))

    @property
    def required(self) -> bool:
        return bool(self.groups)

    def field_names(self) -> list[str]:
        """Every alias across all groups, in declared order."""
        return [alias for group in self.groups for alias in group]

    def __iter__(self) -> Iterator[AuthFieldGroup]:
        return iter(self.groups)

    def __len__(self) -> int:
        return len(self.groups)

    def __bool__(self) -> bool:
        return bool(self.groups)
