from gclint.rules.base import NodeContext, Rule
from gclint.rules.field_naming import FieldNamingConventionRule
from gclint.rules.gc_collect import AvoidGCCollectRule
from gclint.rules.hardcoded_strings import AvoidHardcodedStringsRule, StringLiteralOptions
from gclint.rules.interface_exceptions import InterfaceMethodExceptionRule
from gclint.rules.keep_alive import UseGCKeepAliveRule
from gclint.rules.resource_disposal import ResourceDisposalRule

__all__ = [
    "AvoidGCCollectRule",
    "AvoidHardcodedStringsRule",
    "FieldNamingConventionRule",
    "InterfaceMethodExceptionRule",
    "NodeContext",
    "ResourceDisposalRule",
    "Rule",
    "StringLiteralOptions",
    "UseGCKeepAliveRule",
]
