"""Search criteria and the predicate deciding whether a tool matches.

A ``SearchCriteria`` is an immutable description of what to look for: a query
interpreted according to a ``SearchMode``, an exact tool name, or nothing at
all (which matches every tool). Matching is boolean. A tool matches when any
of the fields selected by ``SearchFields`` matches on its own.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

import mcp

from mcp_toolsearch.errors import PatternError
from mcp_toolsearch.logging import get_logger

logger = get_logger("search_criteria")


class SearchMode(str, Enum):
    """How the query is compared against tool text."""

    SUBSTRING = "substring"
    REGEX = "regex"
    KEYWORDS = "keywords"
    WORD_BOUNDARY = "word_boundary"


@dataclass(frozen=True, slots=True)
class SearchFields:
    """Which parts of a tool are searched.

    The input schema is off by default: extracting its text is comparatively
    expensive and property names tend to produce noisy matches.
    """

    name: bool = True
    title: bool = True
    description: bool = True
    input_schema: bool = False


def extract_schema_text(schema: Any) -> str:
    """Flatten a JSON schema into a space separated search string.

    For every object in the tree this collects its keys, its own
    ``description``, the text of nested objects and any string values. Lists,
    numbers, booleans and nulls contribute nothing. Anything that is not an
    object yields an empty string.
    """
    if not isinstance(schema, Mapping):
        return ""

    parts: list[str] = [f"{key} " for key in schema]

    description = schema.get("description")
    if isinstance(description, str):
        parts.append(f"{description} ")

    for value in schema.values():
        if isinstance(value, Mapping):
            parts.append(extract_schema_text(value))

    for value in schema.values():
        if isinstance(value, str):
            parts.append(f"{value} ")

    return "".join(parts)


# Word boundaries for tool text. Letters and digits are word characters;
# underscores are separators, as in snake_case tool names.
_WORD_START = r"(?<![^\W_])"
_WORD_END = r"(?![^\W_])"


def _compile_pattern(pattern: str) -> re.Pattern[str] | PatternError:
    try:
        return re.compile(pattern)
    except re.error as e:
        logger.debug(f"Regex '{pattern}' failed to compile: {e}")
        return PatternError(pattern, str(e))


@dataclass(frozen=True)
class SearchCriteria:
    """Criteria used to filter tools.

    Use one of the constructors (``with_query``, ``with_name``,
    ``with_regex``, ``with_keywords``, ``match_all``) and refine with
    ``with_mode``, ``with_fields``, ``with_case_sensitive`` or
    ``with_min_description_length``; each returns a new instance.

    An empty query is valid and matches every tool in substring, regex and
    word boundary modes. Pass a non-empty query if that is not wanted.
    """

    query: str | None = None
    name: str | None = None
    mode: SearchMode = SearchMode.SUBSTRING
    fields: SearchFields = field(default_factory=SearchFields)
    case_sensitive: bool = False
    min_description_length: int | None = None
    keywords: tuple[str, ...] = ()
    _pattern: re.Pattern[str] | PatternError | None = field(
        default=None, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if not isinstance(self.keywords, tuple):
            object.__setattr__(self, "keywords", tuple(self.keywords))
        if self.mode is SearchMode.REGEX and self.query is not None:
            object.__setattr__(self, "_pattern", _compile_pattern(self.query))

    # -- constructors -----------------------------------------------------

    @classmethod
    def with_query(cls, query: str) -> SearchCriteria:
        """Case-insensitive substring search."""
        return cls(query=query)

    @classmethod
    def with_name(cls, name: str) -> SearchCriteria:
        """Exact tool name lookup."""
        return cls(name=name)

    @classmethod
    def with_regex(cls, pattern: str) -> SearchCriteria:
        return cls(query=pattern, mode=SearchMode.REGEX)

    @classmethod
    def with_keywords(cls, keywords: Sequence[str]) -> SearchCriteria:
        """All keywords must appear in a single field."""
        return cls(mode=SearchMode.KEYWORDS, keywords=tuple(keywords))

    @classmethod
    def match_all(cls) -> SearchCriteria:
        return cls()

    # -- refinements ------------------------------------------------------

    def with_mode(self, mode: SearchMode) -> SearchCriteria:
        return replace(self, mode=mode)

    def with_fields(self, fields: SearchFields) -> SearchCriteria:
        return replace(self, fields=fields)

    def with_case_sensitive(self, case_sensitive: bool = True) -> SearchCriteria:
        return replace(self, case_sensitive=case_sensitive)

    def with_min_description_length(self, length: int | None) -> SearchCriteria:
        return replace(self, min_description_length=length)

    @property
    def pattern_error(self) -> PatternError | None:
        """The compile error for an invalid regex query, if any."""
        return self._pattern if isinstance(self._pattern, PatternError) else None

    @property
    def is_match_all(self) -> bool:
        return self.name is None and self.query is None and not self.keywords

    # -- matching ---------------------------------------------------------

    def _fold(self, text: str) -> str:
        return text if self.case_sensitive else text.lower()

    def _regex_matches(self, text: str) -> bool:
        if not isinstance(self._pattern, re.Pattern):
            return False
        return self._pattern.search(text) is not None

    def _word_boundary_matches(self, text: str) -> bool:
        """Match the query as whole words.

        A boundary is only asserted next to a letter or digit at either end
        of the query, so ``.txt`` matches ``notes.txt`` but not ``x.txt2``.
        """
        query = self._fold(self.query or "")
        search_text = self._fold(text)
        if not query:
            # Nothing to bound; an empty query matches like a substring search
            return True
        start = _WORD_START if query[0].isalnum() else ""
        end = _WORD_END if query[-1].isalnum() else ""
        try:
            pattern = re.compile(f"{start}{re.escape(query)}{end}")
        except re.error:
            return query in search_text
        return pattern.search(search_text) is not None

    def text_matches(self, text: str) -> bool:
        """Check a single text fragment against the query for this mode."""
        if self.mode is SearchMode.SUBSTRING:
            return self._fold(self.query or "") in self._fold(text)

        if self.mode is SearchMode.REGEX:
            return self._regex_matches(text)

        if self.mode is SearchMode.KEYWORDS:
            search_text = self._fold(text)
            return all(self._fold(keyword) in search_text for keyword in self.keywords)

        return self._word_boundary_matches(text)

    def searchable_texts(self, tool: mcp.Tool) -> list[tuple[str, str]]:
        """Collect ``(field, text)`` fragments enabled by the field mask."""
        texts: list[tuple[str, str]] = []

        if self.fields.name:
            texts.append(("name", tool.name))

        if self.fields.title and tool.title:
            texts.append(("title", tool.title))

        if self.fields.description and tool.description:
            texts.append(("description", tool.description))

        if self.fields.input_schema:
            schema_text = extract_schema_text(tool.inputSchema)
            if schema_text:
                texts.append(("input_schema", schema_text))

        return texts

    def matches(self, tool: mcp.Tool) -> bool:
        """Return True if the tool satisfies these criteria."""
        # Exact name lookups ignore every other setting
        if self.name is not None:
            if self.case_sensitive:
                return tool.name == self.name
            return tool.name.lower() == self.name.lower()

        if self.min_description_length is not None:
            description = tool.description
            if description is None or len(description) < self.min_description_length:
                return False

        if self.query is None and not self.keywords:
            return True

        return any(self.text_matches(text) for _field, text in self.searchable_texts(tool))
