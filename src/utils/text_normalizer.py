"""Text normalization utilities for catalog names and encyclopedia text.

This module handles three small but recurring concerns:

1. **Query quoting** -- user text is wrapped in exact-phrase quotes inside a
   Lucene-style provider query, so embedded quote characters are stripped
   first; otherwise a title like ``Say "Hello"`` would break out of the
   phrase and inject query syntax.

2. **Match keys** -- artist and title comparisons (excluding the searched
   artist from the concurrent-releases panel, deduplicating by
   ``title||artist``) are case-insensitive and whitespace-insensitive.

3. **Excerpts** -- encyclopedia extracts are trimmed to their first few
   sentences for the detail and artist panels.
"""

import re


def strip_quotes(text: str) -> str:
    """Remove every double-quote character from *text* and trim it."""
    return text.replace('"', "").strip()


def quoted_phrase(field: str, text: str) -> str:
    """Build an exact-phrase query clause, e.g. ``recording:"Heroes"``."""
    return f'{field}:"{strip_quotes(text)}"'


def match_key(text: str | None) -> str:
    """Normalize a name for equality checks.

    ``"  The  Clash "`` and ``"the clash"`` both become ``"the clash"``.
    """
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip().casefold()


def excerpt(text: str | None, max_sentences: int) -> str | None:
    """Return the first *max_sentences* sentences of *text*.

    Sentences are split on ``". "`` the way encyclopedia summaries are
    written; the result always ends with a full stop.
    """
    if not text:
        return None
    sentences = text.split(". ")[:max_sentences]
    joined = ". ".join(sentences).rstrip()
    if not joined.endswith("."):
        joined += "."
    return joined


def title_slug(title: str) -> str:
    """Turn a page title into the encyclopedia's path form (spaces -> ``_``)."""
    return title.strip().replace(" ", "_")
