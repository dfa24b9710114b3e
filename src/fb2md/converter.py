#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/fb2md/converter.py
"""FB2 to Markdown conversion pipeline.

A conversion runs these steps, each on state private to the run:

1. Load the raw bytes (plain ``.fb2``, zipped ``.fb2.zip`` or ``.zip``, bytes or stream).
2. Normalize the declared character encoding to UTF-8.
3. Parse the XML and check for the ``FictionBook`` root.
4. Create the images directory when extraction is enabled.
5. Pre-assign output filenames to embedded binaries.
6. Collect footnote texts from the notes bodies.
7. Render description, main bodies and the footnote appendix.
8. Decode and write embedded images.

:func:`convert_file` adds the file-level concerns: deriving default output
and images paths, and writing the Markdown only once the conversion has
succeeded.
"""

from __future__ import annotations

import io
import logging
import os
import tempfile
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Union

import defusedxml.ElementTree as ET

from fb2md.assets import AssetExtractionReport, assign_asset_filenames, extract_assets
from fb2md.constants import EPUB_EXTENSION, FB2_EXTENSION, IMAGES_DIR_SUFFIX, ZIP_EXTENSION, ZIP_MAGIC
from fb2md.encoding import normalize_encoding
from fb2md.exceptions import (
    AssetDirectoryError,
    FormatError,
    InputFileError,
    OutputWriteError,
    ParsingError,
    ValidationError,
)
from fb2md.footnotes import FootnoteTable, collect_footnotes, is_notes_body
from fb2md.options import Fb2MarkdownOptions
from fb2md.renderer import Fb2MarkdownRenderer
from fb2md.xml_utils import iter_children, parse_fb2_root

logger = logging.getLogger(__name__)

SourceType = Union[str, Path, IO[bytes], bytes]


@dataclass
class ConversionResult:
    """Markdown text and side products of one conversion."""

    markdown: str
    assets: AssetExtractionReport = field(default_factory=AssetExtractionReport)
    footnotes: FootnoteTable = field(default_factory=FootnoteTable)


class Fb2Converter:
    """Convert FB2 documents to Markdown.

    Parameters
    ----------
    options : Fb2MarkdownOptions or None, default = None
        Conversion options

    """

    def __init__(self, options: Fb2MarkdownOptions | None = None):
        """Initialize the converter with options."""
        if options is not None and not isinstance(options, Fb2MarkdownOptions):
            raise ValidationError(
                f"Expected Fb2MarkdownOptions, got {type(options).__name__}",
                parameter_name="options",
                parameter_value=options,
            )
        self.options = options or Fb2MarkdownOptions()

    def convert(self, source: SourceType) -> ConversionResult:
        """Convert an FB2 source (path, bytes or binary stream) to Markdown."""
        return self.convert_bytes(load_fb2_bytes(source))

    def convert_bytes(self, data: bytes) -> ConversionResult:
        """Convert raw FB2 bytes in any supported declared encoding."""
        root = parse_fb2_root(normalize_encoding(data))
        return self.convert_tree(root)

    def convert_tree(self, root: ET.Element) -> ConversionResult:
        """Convert an already parsed ``FictionBook`` element."""
        images_dir = self._prepare_images_dir()

        asset_filenames = assign_asset_filenames(root, self.options.default_asset_basename)
        footnotes = self.collect_footnotes(root, asset_filenames)

        renderer = Fb2MarkdownRenderer(self.options, footnotes=footnotes, asset_filenames=asset_filenames)
        markdown = renderer.render_to_string(root)
        logger.debug("Rendered %d characters, %d footnote(s) cited", len(markdown), len(footnotes.order))

        report = AssetExtractionReport()
        if images_dir is not None:
            report = extract_assets(root, asset_filenames, images_dir)
        return ConversionResult(markdown=markdown, assets=report, footnotes=footnotes)

    def collect_footnotes(self, root: ET.Element, asset_filenames: dict[str, str] | None = None) -> FootnoteTable:
        """Build the footnote table from every notes body.

        Note paragraphs are rendered with an empty footnote table, so links
        between notes stay ordinary links and do not count as citations.
        """
        prescan = Fb2MarkdownRenderer(self.options, asset_filenames=asset_filenames)
        table = FootnoteTable()
        for body in iter_children(root, "body"):
            if is_notes_body(body, self.options.notes_body_names):
                table.notes.update(collect_footnotes(body, prescan.capture_inline))
        return table

    def _prepare_images_dir(self) -> Path | None:
        if not self.options.extract_images:
            return None
        images_dir = Path(self.options.images_dir or ".")
        try:
            images_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise AssetDirectoryError(str(images_dir), original_error=exc) from exc
        return images_dir


def load_fb2_bytes(source: SourceType) -> bytes:
    """Read FB2 bytes from a path, raw bytes or a binary stream.

    ZIP archives (``.fb2.zip`` or ``.zip``) are opened and their ``.fb2`` member read.

    Raises
    ------
    InputFileError
        If a path cannot be read.
    ParsingError
        If a ZIP archive is corrupt or holds no ``.fb2`` member.
    ValidationError
        If the source type is not supported.

    """
    if isinstance(source, (str, Path)):
        path = Path(source)
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise InputFileError(str(path), original_error=exc) from exc
    elif isinstance(source, bytes):
        data = source
    elif hasattr(source, "read"):
        data = source.read()
        if isinstance(data, str):
            data = data.encode("utf-8")
    else:
        raise ValidationError(
            f"Unsupported input type for FB2 conversion: {type(source).__name__}",
            parameter_name="source",
            parameter_value=source,
        )

    if data.startswith(ZIP_MAGIC):
        return _extract_fb2_from_zip(data)
    return data


def _extract_fb2_from_zip(data: bytes) -> bytes:
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            members = [
                info for info in archive.infolist() if not info.is_dir() and info.filename.lower().endswith(FB2_EXTENSION)
            ]
            if not members:
                raise ParsingError(
                    "FB2 archive does not contain an .fb2 file",
                    parsing_stage="archive_extraction",
                )
            # Prefer the shortest name (heuristic for primary document)
            member = sorted(members, key=lambda info: len(info.filename))[0]
            return archive.read(member)
    except zipfile.BadZipFile as exc:
        raise ParsingError(
            "Failed to read FB2 ZIP archive",
            parsing_stage="archive_opening",
            original_error=exc,
        ) from exc


def is_fb2_path(path: Union[str, Path]) -> bool:
    """Return True for ``.fb2``, ``.fb2.zip`` and ``.zip`` file names.

    A ``.zip`` without an ``.fb2`` member is rejected later, when it is read.
    """
    name = Path(path).name.lower()
    return name.endswith(FB2_EXTENSION) or name.endswith(ZIP_EXTENSION)


def default_output_path(input_path: Union[str, Path], output_dir: Union[str, Path, None] = None) -> Path:
    """Return ``<stem>.md`` for an input file, inside ``output_dir`` if given."""
    name = Path(input_path).name
    lowered = name.lower()
    for suffix in (FB2_EXTENSION + ZIP_EXTENSION, FB2_EXTENSION, ZIP_EXTENSION):
        if lowered.endswith(suffix):
            name = name[: -len(suffix)]
            break
    else:
        name = Path(name).stem
    return Path(output_dir or ".") / f"{name}.md"


def default_images_dir(output_path: Union[str, Path]) -> str:
    """Return ``<output without extension>_images`` for an output path."""
    output = Path(output_path)
    return str(output.with_suffix("")) + IMAGES_DIR_SUFFIX


def write_output(markdown: str, output_path: Union[str, Path]) -> None:
    """Write Markdown through a temporary file renamed into place.

    Raises
    ------
    OutputWriteError
        If the file cannot be written; no partial output is left behind.

    """
    output = Path(output_path)
    tmp_name: str | None = None
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=output.parent, prefix=f".{output.name}.", suffix=".tmp", delete=False
        ) as handle:
            tmp_name = handle.name
            handle.write(markdown)
        os.replace(tmp_name, output)
    except OSError as exc:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise OutputWriteError(str(output), original_error=exc) from exc


def convert_file(
    input_path: Union[str, Path],
    output_path: Union[str, Path, None] = None,
    options: Fb2MarkdownOptions | None = None,
) -> ConversionResult:
    """Convert one FB2 file and write the Markdown next to it or to ``output_path``.

    When image extraction is enabled without an images directory, images go
    to ``<output without extension>_images``.

    Raises
    ------
    FormatError
        If the input is not an FB2 file.
    Fb2MdError
        Any fatal conversion error; the output file is not created.

    """
    input_path = Path(input_path)
    if not is_fb2_path(input_path):
        extension = input_path.suffix.lower()
        if extension == EPUB_EXTENSION:
            raise FormatError("EPUB input is not supported by the FB2 converter", format_type=extension)
        raise FormatError(format_type=extension or input_path.name)

    output = Path(output_path) if output_path is not None else default_output_path(input_path)
    options = options or Fb2MarkdownOptions()
    if options.extract_images and not options.images_dir:
        options = options.create_updated(images_dir=default_images_dir(output))

    logger.debug("Converting %s -> %s", input_path, output)
    result = Fb2Converter(options).convert(input_path)
    write_output(result.markdown, output)
    return result


def to_markdown(source: SourceType, options: Fb2MarkdownOptions | None = None) -> str:
    """Convert an FB2 source to a Markdown string."""
    return Fb2Converter(options).convert(source).markdown


__all__ = [
    "ConversionResult",
    "Fb2Converter",
    "convert_file",
    "default_images_dir",
    "default_output_path",
    "is_fb2_path",
    "load_fb2_bytes",
    "to_markdown",
    "write_output",
]
