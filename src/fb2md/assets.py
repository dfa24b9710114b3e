#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/fb2md/assets.py
"""Embedded image handling for FB2 documents.

FB2 stores images as base64 text inside ``<binary id="..." content-type="...">``
elements at the end of the file, while ``<image l:href="#id"/>`` references
can appear anywhere before them. Output filenames are therefore assigned in
a pre-pass, before rendering, so every reference resolves to the name the
image is later written under:

1. :func:`assign_asset_filenames` builds the id -> filename table.
2. The renderer consults the table for ``<image>`` references.
3. :func:`extract_assets` decodes and writes each binary after rendering.
"""

from __future__ import annotations

import base64
import binascii
import logging
import posixpath
import re
from dataclasses import dataclass, field
from pathlib import Path

import defusedxml.ElementTree as ET

from fb2md.constants import DEFAULT_ASSET_BASENAME, DEFAULT_ASSET_CONTENT_TYPE, DEFAULT_ASSET_EXTENSION
from fb2md.xml_utils import get_attr, iter_children

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")
_BASE64_WHITESPACE = re.compile(r"\s+")


def asset_extension(content_type: str) -> str:
    """Map a binary's declared content type to a file extension.

    Examples
    --------
    >>> asset_extension("image/png")
    '.png'
    >>> asset_extension("image/svg+xml")
    '.jpg'

    """
    content_type = (content_type or DEFAULT_ASSET_CONTENT_TYPE).lower()
    if "png" in content_type:
        return ".png"
    if "gif" in content_type:
        return ".gif"
    return DEFAULT_ASSET_EXTENSION


def sanitize_asset_filename(identifier: str) -> str:
    """Reduce an asset identifier to a filesystem-safe base name.

    Path components are dropped, every character outside letters, digits,
    ``.``, ``_`` and ``-`` becomes ``_``, and leading or trailing separators
    are trimmed.

    Returns
    -------
    str
        The sanitized name, or ``""`` when nothing usable remains.

    Examples
    --------
    >>> sanitize_asset_filename("../../etc/cover image.jpg")
    'cover_image.jpg'
    >>> sanitize_asset_filename("...")
    ''

    """
    name = (identifier or "").strip()
    if not name:
        return ""
    name = posixpath.basename(name.replace("\\", "/"))
    name = _UNSAFE_FILENAME_CHARS.sub("_", name).strip("._-")
    if name in {"", ".", ".."}:
        return ""
    return name


def assign_asset_filenames(root: ET.Element, default_basename: str = DEFAULT_ASSET_BASENAME) -> dict[str, str]:
    """Pre-assign a unique output filename to every ``<binary>`` with an id.

    The extension comes from the content type and is appended unless the
    sanitized id already ends with it in any letter case (the id's spelling
    is kept). When two binaries land on the same name the later one gets
    ``_2``, ``_3``, ... before the extension.

    Parameters
    ----------
    root : Element
        The ``FictionBook`` root element
    default_basename : str, default "image"
        Base name used when an id sanitizes to nothing

    Returns
    -------
    dict[str, str]
        Mapping of binary id to output filename

    """
    filenames: dict[str, str] = {}
    used: set[str] = set()
    for binary in iter_children(root, "binary"):
        binary_id = get_attr(binary, "id")
        if not binary_id:
            continue

        ext = asset_extension(get_attr(binary, "content-type", DEFAULT_ASSET_CONTENT_TYPE))
        base = sanitize_asset_filename(binary_id) or default_basename
        if base.lower().endswith(ext) and len(base) > len(ext):
            # Keep the id's own spelling of the extension
            stem, ext = base[: -len(ext)], base[-len(ext) :]
            filename = base
        else:
            stem, filename = base, f"{base}{ext}"

        suffix = 2
        while filename in used:
            filename = f"{stem}_{suffix}{ext}"
            suffix += 1

        used.add(filename)
        filenames[binary_id] = filename
    logger.debug("Assigned filenames to %d embedded binaries", len(filenames))
    return filenames


def asset_reference_path(filename: str, images_dir: str | None) -> str:
    """Join an asset filename with the images directory using forward slashes."""
    if not images_dir:
        return filename
    return Path(images_dir, filename).as_posix()


@dataclass
class AssetExtractionReport:
    """Outcome of writing embedded binaries to disk."""

    written: list[Path] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def decode_binary(binary: ET.Element) -> bytes:
    """Decode the base64 payload of a ``<binary>`` element.

    Raises
    ------
    binascii.Error
        If the payload is not valid base64.

    """
    payload = _BASE64_WHITESPACE.sub("", binary.text or "")
    return base64.b64decode(payload, validate=True)


def extract_assets(root: ET.Element, filenames: dict[str, str], images_dir: str | Path) -> AssetExtractionReport:
    """Decode every ``<binary>`` and write it under its pre-assigned name.

    A binary that fails to decode or write is logged and skipped; the
    remaining binaries are still written.

    Parameters
    ----------
    root : Element
        The ``FictionBook`` root element
    filenames : dict[str, str]
        Table produced by :func:`assign_asset_filenames`
    images_dir : str or Path
        Existing directory receiving the files

    Returns
    -------
    AssetExtractionReport
        Paths written and ids skipped

    """
    report = AssetExtractionReport()
    directory = Path(images_dir)
    for binary in iter_children(root, "binary"):
        binary_id = get_attr(binary, "id")
        if not binary_id:
            continue

        try:
            data = decode_binary(binary)
        except (binascii.Error, ValueError) as exc:
            logger.warning("Failed to decode image %s: %s", binary_id, exc)
            report.skipped.append(binary_id)
            continue

        filename = filenames.get(binary_id)
        if not filename:
            # Binaries without a table entry keep a name derived from their id
            ext = asset_extension(get_attr(binary, "content-type", DEFAULT_ASSET_CONTENT_TYPE))
            filename = sanitize_asset_filename(binary_id) or DEFAULT_ASSET_BASENAME
            if not filename.lower().endswith(ext):
                filename += ext

        target = directory / filename
        try:
            target.write_bytes(data)
        except OSError as exc:
            logger.warning("Failed to write image %s: %s", binary_id, exc)
            report.skipped.append(binary_id)
            continue
        report.written.append(target)

    logger.debug("Wrote %d image(s), skipped %d", len(report.written), len(report.skipped))
    return report


__all__ = [
    "AssetExtractionReport",
    "asset_extension",
    "asset_reference_path",
    "assign_asset_filenames",
    "decode_binary",
    "extract_assets",
    "sanitize_asset_filename",
]
