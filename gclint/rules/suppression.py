# Context predicates used to suppress findings: attribute arguments, documentation
# comments and test code. Pure functions over a node's ancestors.

from __future__ import annotations

from gclint.syntax import NodeKind, SyntaxNode

TEST_ATTRIBUTE_MARKERS = ("Test", "Fact")
TEST_CLASS_MARKER = "Test"


def has_test_attribute(declaration: SyntaxNode) -> bool:
    """[Test], [TestMethod], [Fact], [Xunit.Fact], [TestFixture], ..."""
    for attribute in declaration.attributes:
        written = attribute.text or ""
        if any(marker in written for marker in TEST_ATTRIBUTE_MARKERS):
            return True
    return False


def is_in_attribute(node: SyntaxNode) -> bool:
    return node.has_ancestor(NodeKind.ATTRIBUTE)


def is_in_doc_comment(node: SyntaxNode) -> bool:
    return node.has_ancestor(NodeKind.DOC_COMMENT)


def is_in_test_context(node: SyntaxNode) -> bool:
    """
    Nearest enclosing method carries a test attribute, or the nearest enclosing
    class carries one or has "Test" in its name (UserTests, TestHelpers, ...).
    """
    method = node.first_ancestor(NodeKind.METHOD_DECLARATION)
    if method is not None and has_test_attribute(method):
        return True
    owner = node.first_ancestor(NodeKind.CLASS_DECLARATION)
    if owner is not None:
        return has_test_attribute(owner) or TEST_CLASS_MARKER in (owner.name or "")
    return False
