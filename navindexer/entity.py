"""Interfaces shared by indexed documents, and slug generation."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from slugify import slugify


def make_slug(text: str) -> str:
    """Return a lower-case, URL-safe identifier built from ``text``."""
    return slugify(text)


@runtime_checkable
class Entity(Protocol):
    """A document that is stored under a slug identifier."""

    def slug(self) -> str:
        ...


@runtime_checkable
class ChainHeight(Protocol):
    """Anything that records the block height it was created at."""

    height: int