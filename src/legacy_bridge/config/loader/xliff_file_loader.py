# SPDX-License-Identifier: EUPL-1.2
# SPDX-FileCopyrightText: © 2025-present Jürgen Mülbert

"""
XLIFF file loader.

Reads XLIFF 1.2 translation files and converts their translation units
into the legacy `TL_LANG` structure. The loader runs in one of two modes:

- string mode returns legacy assignment source, one line per unit::

      // languages/en/default.xlf
      $GLOBALS['TL_LANG']['MSC']['first'] = 'First label';

- global mode writes every unit into a `LanguageTable` and returns None.

Which text is taken from a unit depends on the file's declared
`source-language`: when the requested locale equals it the `<source>`
text is used, otherwise the `<target>` text.

Typical usage:
--------------
>>> loader = XliffFileLoader(root_dir, add_to_globals=True)
>>> loader.load(root_dir / "languages/de/default.xlf", "de")
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING, Final

import structlog
from defusedxml import ElementTree
from defusedxml.common import DefusedXmlException

from legacy_bridge.exceptions import LanguageFileError, NestingLevelExceededError
from legacy_bridge.legacy.globals import LANGUAGE_TABLE_KEY, LegacyGlobalsSingleton

if TYPE_CHECKING:
    from collections.abc import Iterator
    from xml.etree.ElementTree import Element

    from legacy_bridge.legacy.language_table import Key, LanguageTable

log: structlog.stdlib.BoundLogger
log = structlog.get_logger(__name__)

MIN_LEVELS: Final[int] = 2
MAX_LEVELS: Final[int] = 4

# A key segment followed by one of these is a file name, e.g. "responsive.css".
FILE_EXTENSION_SEGMENTS: Final[frozenset[str]] = frozenset({"css", "js"})

_NUMERIC_SEGMENT = re.compile(r"^(0|[1-9][0-9]*)$")


def _local_name(tag: str) -> str:
    """Strip the `{namespace}` prefix from an element tag."""
    return tag.rsplit("}", 1)[-1]


class XliffFileLoader:
    """
    Load XLIFF files into the legacy language table.

    Attributes
    ----------
    root_dir : Path
        Paths in the string output are written relative to this directory.
    add_to_globals : bool
        True to write into the language table, False to return source text.
    """

    EXTENSION: Final[str] = ".xlf"

    def __init__(
        self,
        root_dir: str | Path,
        add_to_globals: bool = False,  # noqa: FBT001, FBT002
        language_table: LanguageTable | None = None,
    ) -> None:
        self.root_dir = Path(root_dir)
        self.add_to_globals = add_to_globals
        self._language_table = language_table

    @property
    def language_table(self) -> LanguageTable:
        """Return the injected table, or the process-wide `TL_LANG` table."""
        if self._language_table is None:
            return LegacyGlobalsSingleton.get_instance().language_table
        return self._language_table

    def supports(self, resource: str | Path, type: str | None = None) -> bool:  # noqa: A002, ARG002
        """Return True if `resource` is an `.xlf` file."""
        return Path(resource).suffix == self.EXTENSION

    def load(self, resource: str | Path, locale: str) -> str | None:
        """
        Load an XLIFF file.

        Args:
            resource: Path of the XLIFF file.
            locale: The language to load. Compared against each `<file>`
                element's `source-language` attribute.

        Returns:
            The legacy source text in string mode, None in global mode.

        Raises:
            LanguageFileError: If the file cannot be read or parsed.
            NestingLevelExceededError: If a unit id has fewer than two or
                more than four levels.
        """
        path = Path(resource)
        root = self._parse(path)

        # Every unit id is validated before the language table is touched.
        units = list(self._iter_units(root, locale))

        log.debug(
            "Loaded language file",
            path=str(path),
            locale=locale,
            units=len(units),
            add_to_globals=self.add_to_globals,
        )

        if self.add_to_globals:
            for chunks, value in units:
                self.language_table.set_path(chunks, value)
            return None

        header = f"\n// {self._relative_path(path)}\n"
        return header + "".join(f"{self._render_line(chunks, value)}\n" for chunks, value in units)

    def _parse(self, path: Path) -> Element:
        try:
            with path.open("rb") as f:
                return ElementTree.parse(f).getroot()
        except OSError as e:
            msg = f"Could not read language file: {path!s}"
            log.exception(msg, path=str(path), exc_info=e)
            raise LanguageFileError(msg) from e
        except (ElementTree.ParseError, DefusedXmlException) as e:
            msg = f"Language file is not a valid XLIFF document: {path!s}"
            log.exception(msg, path=str(path), exc_info=e)
            raise LanguageFileError(msg) from e

    def _iter_units(self, root: Element, locale: str) -> Iterator[tuple[list[Key], str]]:
        """Yield `(chunks, value)` for every unit in document order."""
        for file_element in root.iter():
            if _local_name(file_element.tag) != "file":
                continue

            wanted = "source" if locale == file_element.get("source-language") else "target"

            for unit in file_element.iter():
                if _local_name(unit.tag) != "trans-unit":
                    continue

                text_element = next((child for child in unit if _local_name(child.tag) == wanted), None)
                if text_element is None:
                    continue

                chunks = self.get_chunks(unit.get("id", ""))
                value = "".join(text_element.itertext()).replace("\r\n", "\n").replace("\r", "\n")
                yield chunks, value

    @staticmethod
    def get_chunks(unit_id: str) -> list[Key]:
        """
        Split a unit id into the keys of the language table.

        `MSC.third.with.1` becomes `["MSC", "third", "with", 1]`; a segment
        followed by a file extension stays one key, so
        `tl_layout.responsive.css.1` becomes `["tl_layout", "responsive.css", 1]`.

        Raises:
            NestingLevelExceededError: If the id has fewer than two or more
                than four levels.
        """
        segments = unit_id.split(".")
        merged: list[str] = []
        for segment in segments:
            if merged and segment in FILE_EXTENSION_SEGMENTS and len(merged) > 1:
                merged[-1] = f"{merged[-1]}.{segment}"
            else:
                merged.append(segment)

        if not MIN_LEVELS <= len(merged) <= MAX_LEVELS:
            msg = f"Cannot load less than {MIN_LEVELS} or more than {MAX_LEVELS} levels: {unit_id!r}"
            raise NestingLevelExceededError(msg)

        return [int(segment) if _NUMERIC_SEGMENT.match(segment) else segment for segment in merged]

    def _relative_path(self, path: Path) -> str:
        try:
            return path.relative_to(self.root_dir).as_posix()
        except ValueError:
            return path.as_posix()

    @staticmethod
    def _render_line(chunks: list[Key], value: str) -> str:
        keys = "".join(f"[{XliffFileLoader._quote_key(chunk)}]" for chunk in chunks)
        return f"$GLOBALS['{LANGUAGE_TABLE_KEY}']{keys} = {XliffFileLoader.quote_value(value)};"

    @staticmethod
    def _quote_key(key: Key) -> str:
        if isinstance(key, int):
            return str(key)
        return "'" + key.replace("\\", "\\\\").replace("'", "\\'") + "'"

    @staticmethod
    def quote_value(value: str) -> str:
        """
        Quote a label for the legacy source output.

        Multi-line values are double-quoted with `\\n` escapes, everything
        else is single-quoted.
        """
        if "\n" in value:
            escaped = (
                value.replace("\\", "\\\\")
                .replace('"', '\\"')
                .replace("$", "\\$")
                .replace("\n", "\\n")
            )
            return f'"{escaped}"'

        return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"
