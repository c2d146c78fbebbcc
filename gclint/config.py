from __future__ import annotations

"""
Analyzer configuration: which rules are enabled and how they are instantiated.

Only the hardcoded-string rule takes options (minimum length and allow-list);
every other rule is fixed. The CLI in main.py builds a Config from its flags,
library users call get_default_config() directly.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from gclint.rules import (
    AvoidGCCollectRule,
    AvoidHardcodedStringsRule,
    FieldNamingConventionRule,
    InterfaceMethodExceptionRule,
    ResourceDisposalRule,
    Rule,
    StringLiteralOptions,
    UseGCKeepAliveRule,
)


@dataclass
class Config:
    """
    Analyzer configuration.

    rules is the full rule set; disabled_rules holds ids (e.g. "RULE-006")
    that get_enabled_rules() leaves out.
    """

    rules: Sequence[Rule] = field(default_factory=list)
    disabled_rules: frozenset[str] = frozenset()
    strings: StringLiteralOptions = field(default_factory=StringLiteralOptions)


def get_default_config(
    strings: Optional[StringLiteralOptions] = None,
    disabled_rules: Iterable[str] = (),
) -> Config:
    """Return a configuration with all six rules, in rule-id order."""
    strings = strings or StringLiteralOptions()
    rules: List[Rule] = [
        AvoidGCCollectRule(),
        UseGCKeepAliveRule(),
        ResourceDisposalRule(),
        InterfaceMethodExceptionRule(),
        FieldNamingConventionRule(),
        AvoidHardcodedStringsRule(strings),
    ]
    return Config(rules=rules, disabled_rules=frozenset(disabled_rules), strings=strings)


def get_enabled_rules(config: Config | None = None) -> Sequence[Rule]:
    """Return the rules of config (or the default config) minus the disabled ids."""
    if config is None:
        config = get_default_config()
    return [rule for rule in config.rules if rule.id not in config.disabled_rules]
