# Hardcoded string detection: user-facing text embedded in code instead of
# resources or constants.

from __future__ import annotations

from dataclasses import dataclass, field

from gclint.findings.models import Diagnostic, RuleDescriptor, Severity
from gclint.rules.base import NodeContext, Rule
from gclint.rules.suppression import is_in_attribute, is_in_doc_comment, is_in_test_context
from gclint.syntax import NodeKind, SyntaxNode

DEFAULT_MINIMUM_LENGTH = 3

# Separators, whitespace and escapes that are fine inline. Both the escaped
# spelling ("\\n", two characters) and the control character itself are listed.
DEFAULT_ALLOWED_LITERALS = frozenset(
    {
        "",
        " ",
        "\\n",
        "\\r",
        "\\t",
        "\n",
        "\r",
        "\t",
        ",",
        ".",
        ":",
        ";",
        "-",
        "_",
        "=",
        "+",
        "*",
        "/",
        "\\",
        "(",
        ")",
        "[",
        "]",
        "{",
        "}",
        "<",
        ">",
        '"',
        "'",
        "`",
    }
)


@dataclass(frozen=True)
class StringLiteralOptions:
    minimum_length: int = DEFAULT_MINIMUM_LENGTH
    allowed_literals: frozenset[str] = field(default=DEFAULT_ALLOWED_LITERALS)


class AvoidHardcodedStringsRule(Rule):
    """Reports string literals outside attributes, doc comments and test code."""

    descriptor = RuleDescriptor(
        id="RULE-006",
        title="Avoid hardcoded strings",
        message_format="String literal \"{0}\" should be moved to a resource file or a named constant",
        category="Maintainability",
        default_severity=Severity.INFO,
        description="Hardcoded text is hard to localise and to change consistently.",
    )
    node_kinds = frozenset({NodeKind.STRING_LITERAL})

    def __init__(self, options: StringLiteralOptions | None = None) -> None:
        self.options = options or StringLiteralOptions()

    def is_exempt_value(self, value: str) -> bool:
        return (
            len(value) < self.options.minimum_length
            or value in self.options.allowed_literals
            or not value.strip()
        )

    def run(self, node: SyntaxNode, context: NodeContext) -> list[Diagnostic]:
        value = node.text
        if value is None or self.is_exempt_value(value):
            return []
        if is_in_attribute(node) or is_in_doc_comment(node) or is_in_test_context(node):
            return []
        return [self.report(context, node, value)]
