"""
Privilege definition model.

A privilege definition names an access-control capability, optionally marks it
abstract (not directly grantable) and optionally lists the privileges it
aggregates.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .namespaces import split_qualified_name


class PrivilegeDefinition(BaseModel):
    """
    Immutable privilege definition.

    Attributes:
        name: Qualified name, ``prefix:localName``
        is_abstract: Whether the privilege can only be granted through an aggregate
        aggregates: Names of the aggregated privileges, in declaration order.
            Empty when the privilege is not an aggregate.

    Two definitions are equal when name, abstract flag and aggregate sequence
    (including its order) are equal.
    """

    name: str
    is_abstract: bool = False
    aggregates: tuple[str, ...] = Field(default_factory=tuple)

    model_config = ConfigDict(frozen=True)

    @field_validator("aggregates", mode="before")
    @classmethod
    def _none_means_not_aggregate(cls, value: Any) -> Any:
        if value is None:
            return ()
        return value

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        split_qualified_name(value)
        return value

    @field_validator("aggregates")
    @classmethod
    def _check_aggregates(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        for name in value:
            split_qualified_name(name)
        return value

    @property
    def prefix(self) -> str:
        return split_qualified_name(self.name)[0]

    @property
    def local_name(self) -> str:
        return split_qualified_name(self.name)[1]

    @property
    def is_aggregate(self) -> bool:
        return bool(self.aggregates)

    def referenced_prefixes(self) -> set[str]:
        """All namespace prefixes used by the name and the aggregates."""
        return {split_qualified_name(n)[0] for n in (self.name, *self.aggregates)}
