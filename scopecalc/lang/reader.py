"""Reads scopecalc source text into nested literal data, the input of the parser in scopecalc.pure.syntax.

A datum is one of

```
<datum> ::= <integer>               ; -?[0-9]+, read as int
          | <symbol>                ; any other run of non-whitespace, non-bracket characters, read as Symbol
          | "(" <datum>* ")"        ; read as list
          | "[" <datum>* "]"        ; same as parentheses, must be closed by the same kind of bracket
```

The reader knows nothing about special forms: `(let ([x 1]) x)` is read as a plain nested list and only the parser
decides whether it is a valid let.
"""

import re

from scopecalc.lang.error import ParseError


TOKENS = re.compile(r"[()\[\]]|[^\s()\[\]]+")
INTEGER = re.compile(r"-?[0-9]+")
BRACKETS = {"(": ")", "[": "]"}


class Symbol(str):
    """Symbol atom. Subclasses str so that plain strings can be used as symbols when building data by hand."""

    def __repr__(self):
        return f"Symbol('{self}')"


def tokenize(text):
    """Splits text into bracket and atom tokens."""
    return TOKENS.findall(text)


def is_symbol(datum):
    """Whether or not datum is a string that reads back as the same symbol."""
    return isinstance(datum, str) and tokenize(datum) == [datum] and datum not in BRACKETS.values() \
        and datum not in BRACKETS and not INTEGER.fullmatch(datum)


def atom(token):
    """Converts a non-bracket token to int or Symbol."""
    if INTEGER.fullmatch(token):
        return int(token)
    return Symbol(token)


def read(text):
    """Reads exactly one datum from text. Raises ParseError on empty input, unbalanced or mismatched brackets, or
    trailing data.
    """
    tokens = tokenize(text)
    if not tokens:
        raise ParseError("expression cannot be empty", text.strip())

    datum, pos = _read(tokens, 0, text)
    if pos != len(tokens):
        raise ParseError("'{}' contains more than one expression", text.strip())
    return datum


def _read(tokens, pos, text):
    """Reads the datum starting at tokens[pos]. Returns (datum, position after the datum)."""
    token = tokens[pos]

    if token in BRACKETS:
        closing = BRACKETS[token]
        datum = []
        pos += 1
        while pos < len(tokens) and tokens[pos] != closing:
            if tokens[pos] in BRACKETS.values():
                raise ParseError("'{}' has mismatched brackets: expected '{}', got '{}'",
                                 (text.strip(), closing, tokens[pos]))
            sub_datum, pos = _read(tokens, pos, text)
            datum.append(sub_datum)

        if pos == len(tokens):
            raise ParseError("'{}' has unbalanced brackets", text.strip())
        return datum, pos + 1

    elif token in BRACKETS.values():
        raise ParseError("'{}' has stray closing bracket '{}'", (text.strip(), token))

    return atom(token), pos + 1


def write(datum):
    """Converts datum back to text. Inverse of read for anything read produces."""
    if isinstance(datum, list):
        return "(" + " ".join(write(sub_datum) for sub_datum in datum) + ")"
    return str(datum)


def bracket_balance(line):
    """Number of opening brackets minus number of closing brackets in line."""
    return sum(line.count(char) for char in BRACKETS) - sum(line.count(char) for char in BRACKETS.values())
