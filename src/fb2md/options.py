#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Configuration options for FB2-to-Markdown conversion.

Options are frozen dataclasses; use :meth:`CloneFrozenMixin.create_updated`
to derive a modified copy.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from fb2md.constants import DEFAULT_ASSET_BASENAME, DEFAULT_NOTES_BODY_NAMES, MAX_HEADING_LEVEL


@dataclass(frozen=True)
class CloneFrozenMixin:
    """Mixin providing frozen dataclass cloning capabilities."""

    def create_updated(self, **kwargs: Any) -> Any:
        """Create a new instance with updated field values.

        Parameters
        ----------
        **kwargs : Any
            Field names and their new values

        Returns
        -------
        Self
            New instance with specified fields updated

        """
        return replace(self, **kwargs)


@dataclass(frozen=True)
class Fb2MarkdownOptions(CloneFrozenMixin):
    """Configuration options for FB2-to-Markdown conversion.

    Parameters
    ----------
    extract_images : bool, default False
        Decode embedded ``<binary>`` images and write them to ``images_dir``.
        When disabled, images render as ``![Image: id]`` placeholders.
    images_dir : str or None, default None
        Directory receiving extracted images. Image references in the
        Markdown are built from this path using forward slashes.
    include_description : bool, default True
        Render the ``<description>`` block (title, authors, genres, series,
        annotation, date) ahead of the body.
    notes_body_names : tuple[str, ...], default ("notes", "footnotes", "comments")
        Values of the body ``name`` attribute that mark note containers.
    max_heading_level : int, default 6
        Deepest Markdown heading level; deeper sections keep this level.
    default_asset_basename : str, default "image"
        Base filename used when an asset identifier sanitizes to nothing.

    """

    extract_images: bool = field(
        default=False,
        metadata={"help": "Extract embedded images to the images directory", "cli_name": "images"},
    )
    images_dir: str | None = field(
        default=None,
        metadata={"help": "Directory for extracted images (default: <output>_images)"},
    )
    include_description: bool = field(
        default=True,
        metadata={"help": "Render book title, authors and annotation before the body"},
    )
    notes_body_names: tuple[str, ...] = field(
        default=DEFAULT_NOTES_BODY_NAMES,
        metadata={"help": "Body name attribute values that hold footnote definitions"},
    )
    max_heading_level: int = field(
        default=MAX_HEADING_LEVEL,
        metadata={"help": "Deepest Markdown heading level emitted for nested sections"},
    )
    default_asset_basename: str = field(
        default=DEFAULT_ASSET_BASENAME,
        metadata={"help": "Fallback base filename for assets with unusable identifiers"},
    )

    def __post_init__(self) -> None:
        """Validate numeric ranges and normalize sequences.

        Raises
        ------
        ValueError
            If any field value is outside its valid range.

        """
        if not 1 <= self.max_heading_level <= MAX_HEADING_LEVEL:
            raise ValueError(
                f"max_heading_level must be between 1 and {MAX_HEADING_LEVEL}, got {self.max_heading_level}"
            )
        if not self.default_asset_basename:
            raise ValueError("default_asset_basename must not be empty")
        object.__setattr__(self, "notes_body_names", tuple(name.lower() for name in self.notes_body_names))
