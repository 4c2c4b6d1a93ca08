"""Shared JSON text utilities for LLM outputs."""

from typing import List

from .errors import ParseError

FENCE = "```"


def clean_markdown(text: str) -> str:
    """Strip a surrounding markdown code fence, if any.

    An opening fence is dropped through the end of its line (so a language
    tag such as ```json goes with it). A fence with no line break is skipped
    up to the first ``{`` or ``[``.
    """
    if not text:
        return ""
    t = text.strip()
    if t.startswith(FENCE):
        newline = t.find("\n")
        if newline > 0:
            t = t[newline + 1:]
        else:
            starts = [i for i in (t.find("{"), t.find("[")) if i > 0]
            if starts:
                t = t[min(starts):]
            else:
                t = t[len(FENCE):]
    t = t.rstrip()
    if t.endswith(FENCE):
        t = t[:-len(FENCE)]
    return t.strip()


def split_objects(content: str) -> List[str]:
    """Split the inner content of a JSON array into top-level object texts.

    Tracks string mode, a one-character escape after a backslash and brace
    depth; an element is emitted when depth returns to zero. Braces and
    commas inside quoted strings never split. Stray top-level text between
    commas is emitted as its own fragment so that it fails on its own.
    """
    fragments: List[str] = []
    current: List[str] = []
    stray: List[str] = []
    depth = 0
    in_string = False
    escape = False

    def flush_stray() -> None:
        text = "".join(stray).strip()
        if text:
            fragments.append(text)
        stray.clear()

    for ch in content:
        if depth == 0 and not in_string:
            if ch == "{":
                flush_stray()
                depth = 1
                current.append(ch)
            elif ch == ",":
                flush_stray()
            elif not ch.isspace() or stray:
                stray.append(ch)
                if ch == '"':
                    in_string = True
            continue

        if depth == 0:
            # inside a stray top-level string
            stray.append(ch)
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue

        current.append(ch)
        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                fragments.append("".join(current).strip())
                current = []

    # Truncated trailing element
    if current:
        fragments.append("".join(current).strip())
    flush_stray()
    return fragments


def split_top_level_array(text: str) -> List[str]:
    """Split a ``[...]`` response into its element object texts.

    Raises ParseError when the text is not an array, or when a non-empty
    array body yields no elements at all. ``[]`` yields an empty list.
    """
    t = text.strip()
    if not (t.startswith("[") and t.endswith("]")):
        preview = t[:80] + ("..." if len(t) > 80 else "")
        raise ParseError(f"Expected a JSON array of items, got: {preview}")

    inner = t[1:-1]
    if not inner.strip():
        return []

    fragments = split_objects(inner)
    if not fragments:
        raise ParseError("JSON array contains no top-level objects.")
    return fragments
