"""
Rule metadata extractor.

Scans Rego source text line by line and recovers the rule inventory: each
rule's name, the comment immediately above its head, and the lines its body
occupies. The scan is a single forward pass with no backtracking:

    1. ``# comment``    -> remembered as a pending description
                           (pure ``====`` / ``----`` dividers are dropped)
    2. blank line       -> pending descriptions forgotten
    3. import/package   -> pending descriptions forgotten
    4. rule head        -> record emitted, body skipped
    5. anything else    -> pending descriptions forgotten

The extractor is total: it never raises, whatever the input. Unbalanced
braces make a rule run to the end of the source rather than failing, since
the output only feeds documentation and coverage display.
"""

from collections.abc import Mapping

from regoscope.scanner.lexer import rule_name
from regoscope.schema import RuleRecord
from regoscope.utils.logging import get_logger

logger = get_logger(__name__)

COMMENT_MARKER = "#"
DIVIDER_CHARS = frozenset("=-")
SKIPPED_PREFIXES = ("import ", "package ")


def split_lines(source: str) -> list[str]:
    """
    Split source into lines on ``\\n`` or ``\\r\\n``.

    A trailing newline does not produce an extra empty line, and other
    Unicode line separators are left inside their line.
    """
    lines = source.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def is_divider(text: str) -> bool:
    """Whether comment text is only ``=``, ``-`` and whitespace."""
    return all(c in DIVIDER_CHARS or c.isspace() for c in text)


def comment_text(line: str) -> str:
    """Strip leading comment markers and surrounding whitespace."""
    return line.lstrip(COMMENT_MARKER).strip()


def find_rule_end(lines: list[str], start_index: int) -> int:
    """
    Find the 1-based line on which a rule's braces balance.

    Counts every ``{`` and ``}`` from the start of ``lines[start_index]``
    onward, including braces inside strings and comments. The result is the
    first line at which the depth is back to zero after an opening brace
    has been seen.

    Args:
        lines: All lines of the policy
        start_index: 0-based index of the rule head

    Returns:
        1-based end line, or the last line number if the braces never balance
    """
    depth = 0
    found_open = False

    for index in range(start_index, len(lines)):
        for char in lines[index]:
            if char == "{":
                depth += 1
                found_open = True
            elif char == "}":
                depth -= 1

        if found_open and depth == 0:
            return index + 1

    logger.debug(
        "Unbalanced braces in rule starting at line %d; running to end of source",
        start_index + 1,
    )
    return len(lines)


def extract(source: str) -> list[RuleRecord]:
    """
    Extract the rule inventory of one policy.

    Args:
        source: Raw Rego source text

    Returns:
        Rule records in source order (ascending start_line)
    """
    lines = split_lines(source)
    rules: list[RuleRecord] = []
    pending_comments: list[str] = []
    index = 0

    while index < len(lines):
        line = lines[index].strip()
        line_number = index + 1

        if line.startswith(COMMENT_MARKER):
            text = comment_text(line)
            if not is_divider(text):
                pending_comments.append(text)
            index += 1
            continue

        if not line or line.startswith(SKIPPED_PREFIXES):
            pending_comments.clear()
            index += 1
            continue

        name = rule_name(line)
        if name is None:
            pending_comments.clear()
            index += 1
            continue

        description = pending_comments[-1] if pending_comments else ""
        pending_comments.clear()

        if "{" in line:
            end_line = find_rule_end(lines, index)
        else:
            end_line = line_number

        rules.append(
            RuleRecord(
                name=name,
                description=description,
                start_line=line_number,
                end_line=end_line,
            )
        )
        # Resume after the rule body
        index = end_line

    return rules


def extract_all(policies: Mapping[str, str]) -> dict[str, list[RuleRecord]]:
    """
    Extract rule inventories for many policies.

    Each policy is scanned independently; no pending comment state carries
    over from one policy to the next.

    Args:
        policies: Policy name to source text

    Returns:
        Policy name to its rule records, with the same keys as ``policies``
    """
    result = {name: extract(source) for name, source in policies.items()}
    logger.debug(
        "Extracted %d rules from %d policies",
        sum(len(rules) for rules in result.values()),
        len(result),
    )
    return result
