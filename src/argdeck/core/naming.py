"""Human labels derived from argument identifiers.

Pure string transform — no I/O, fully deterministic.
"""

from __future__ import annotations


def to_sentence_case(identifier: str) -> str:
    """Turn an identifier into a sentence-cased label.

    Words break on runs of non-alphanumeric characters, after digits,
    and on lower→upper camel-case boundaries.  Only the very first
    letter is upper-cased; everything else is lower-cased.

    >>> to_sentence_case("count_occurrences")
    'Count occurrences'
    >>> to_sentence_case("fooBar")
    'Foo bar'
    >>> to_sentence_case("--output-dir--")
    'Output dir'
    """
    words: list[str] = []
    current: list[str] = []
    previous = ""

    for char in identifier:
        if not char.isalnum():
            if current:
                words.append("".join(current))
                current = []
            previous = ""
            continue
        camel = previous.islower() and char.isupper()
        after_digit = previous.isdigit() and not char.isdigit()
        if current and (camel or after_digit):
            words.append("".join(current))
            current = []
        current.append(char)
        previous = char

    if current:
        words.append("".join(current))

    text = " ".join(words).lower()
    return text[:1].upper() + text[1:]
