"""
Policy source scanner for regoscope.

Recovers a structured rule inventory from raw Rego text without asking the
evaluation engine: rule names, the comment line describing each rule, and
the line range each rule occupies. The inventory drives documentation and
maps engine coverage back onto rules.

Key concepts:
    - Rule head: the line that starts a rule (``allow if {``, ``default x := 1``)
    - Description: the comment line directly above a rule head
    - Line range: from the head to the line where the body's braces balance

Example:
    from regoscope.scanner import extract

    for rule in extract(source):
        print(rule.name, rule.start_line, rule.end_line, rule.description)
"""

from regoscope.scanner.extractor import extract, extract_all, find_rule_end, split_lines
from regoscope.scanner.lexer import Token, TokenKind, match_rule_head, rule_name, tokenize

__all__ = [
    "extract",
    "extract_all",
    "find_rule_end",
    "split_lines",
    "Token",
    "TokenKind",
    "match_rule_head",
    "rule_name",
    "tokenize",
]
