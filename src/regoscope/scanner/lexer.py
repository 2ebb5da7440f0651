"""
Line lexer for Rego rule heads.

Classifies one trimmed source line into a flat token sequence and matches
the leading tokens against the shapes a rule head can take:

    default <name> ...            -> rule <name>
    <name> := ... / <name> = ...  -> rule <name>
    <name> if {... / <name> if ...-> rule <name>
    <name> contains ...           -> rule <name>

Anything else (expressions, comparisons inside bodies, references like
``input.user``) is not a rule head. The lexer only looks at a single line and
does not understand strings or comments; the scanner decides which lines
reach it.
"""

import re
from dataclasses import dataclass
from enum import Enum


class TokenKind(str, Enum):
    """Kinds of tokens produced for a line."""

    WORD = "word"
    KEYWORD = "keyword"
    SPACE = "space"
    ASSIGN = "assign"
    EQUALS = "equals"
    LBRACE = "lbrace"
    RBRACE = "rbrace"
    OTHER = "other"


# Keywords that change how a rule head is read. They are still valid rule
# names when they lead a line (``if := 1`` defines a rule called "if").
KEYWORD_DEFAULT = "default"
KEYWORD_IF = "if"
KEYWORD_CONTAINS = "contains"
KEYWORDS = frozenset({KEYWORD_DEFAULT, KEYWORD_IF, KEYWORD_CONTAINS})

# \w is exactly str.isalnum() plus "_" for str patterns
_TOKEN_RE = re.compile(
    r"""
    (?P<word>\w+)
    |(?P<space>\s+)
    |(?P<assign>:=)
    |(?P<equals>=)
    |(?P<lbrace>\{)
    |(?P<rbrace>\})
    |(?P<other>.)
    """,
    re.VERBOSE | re.DOTALL,
)


@dataclass(frozen=True)
class Token:
    """
    A classified span of a line.

    Attributes:
        kind: Token classification
        text: Exact source text of the span
        column: 0-based offset of the span in the line
    """

    kind: TokenKind
    text: str
    column: int

    @property
    def is_word(self) -> bool:
        """Identifiers and keywords both read as names."""
        return self.kind in (TokenKind.WORD, TokenKind.KEYWORD)

    def is_keyword(self, keyword: str) -> bool:
        return self.kind == TokenKind.KEYWORD and self.text == keyword


def tokenize(line: str) -> list[Token]:
    """
    Split a line into tokens.

    Every character of the line belongs to exactly one token, so joining
    the token texts gives back the line.
    """
    tokens: list[Token] = []
    for match in _TOKEN_RE.finditer(line):
        kind = TokenKind(match.lastgroup)
        text = match.group()
        if kind == TokenKind.WORD and text in KEYWORDS:
            kind = TokenKind.KEYWORD
        tokens.append(Token(kind=kind, text=text, column=match.start()))
    return tokens


def match_rule_head(tokens: list[Token]) -> str | None:
    """
    Return the rule name if the tokens begin a rule head, else None.

    Args:
        tokens: Tokens of a trimmed line, as produced by tokenize()

    Returns:
        The rule name, or None when the line is not a rule head
    """
    if not tokens or not tokens[0].is_word:
        return None

    head = tokens[0]
    if head.is_keyword(KEYWORD_DEFAULT) and _at(tokens, 1, TokenKind.SPACE):
        # default <name> ...: the name is the word right after the keyword
        name = tokens[2] if len(tokens) > 2 else None
        if name is not None and name.is_word:
            return name.text
        return None

    rest = tokens[2:] if _at(tokens, 1, TokenKind.SPACE) else tokens[1:]
    if _is_head_marker(rest):
        return head.text
    return None


def rule_name(line: str) -> str | None:
    """Rule name defined by a trimmed line, or None."""
    return match_rule_head(tokenize(line))


def _at(tokens: list[Token], index: int, kind: TokenKind) -> bool:
    return index < len(tokens) and tokens[index].kind == kind


def _is_head_marker(rest: list[Token]) -> bool:
    """
    Check what follows a candidate name.

    ``:=`` and ``=`` mark assignments (``==`` also starts with ``=`` and is
    accepted). ``if`` must be followed by a literal space or an opening
    brace, and ``contains`` by a literal space.
    """
    if not rest:
        return False

    first = rest[0]
    if first.kind in (TokenKind.ASSIGN, TokenKind.EQUALS):
        return True

    following = rest[1] if len(rest) > 1 else None
    if following is None:
        return False

    if first.is_keyword(KEYWORD_IF):
        return following.kind == TokenKind.LBRACE or (
            following.kind == TokenKind.SPACE and following.text.startswith(" ")
        )

    if first.is_keyword(KEYWORD_CONTAINS):
        return following.kind == TokenKind.SPACE and following.text.startswith(" ")

    return False
