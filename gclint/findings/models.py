# Pydantic data models for diagnostics: Severity, Location, RuleDescriptor, Diagnostic.

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

HELP_LINK_BASE_URL = "https://github.com/Devoo-Consulting/GCAnalyzer/blob/main/docs/rules/"
HELP_LINK_EXTENSION = ".md"


def get_help_link(rule_id: str) -> str:
    """Documentation URL for a rule, e.g. .../docs/rules/RULE-003.md."""
    return f"{HELP_LINK_BASE_URL}{rule_id}{HELP_LINK_EXTENSION}"


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Location(BaseModel):
    """Where in the source a diagnostic was reported (file, line, column)."""

    path: Optional[Path] = None
    line: int = Field(..., ge=1, description="1-based line number")
    column: int = Field(..., ge=1, description="1-based column number")
    end_line: Optional[int] = Field(None, ge=1)
    end_column: Optional[int] = Field(None, ge=1)
    snippet: Optional[str] = None

    model_config = {"arbitrary_types_allowed": True, "frozen": True}


class RuleDescriptor(BaseModel):
    """
    Static description of one rule: identity, default severity and the message
    template its diagnostics are formatted from.

    message_format uses positional str.format placeholders ({0}, {1}, ...).
    """

    id: str
    title: str
    message_format: str
    category: str
    default_severity: Severity
    description: str = ""
    enabled_by_default: bool = True

    model_config = {"frozen": True}

    @property
    def help_link(self) -> str:
        return get_help_link(self.id)

    def format_message(self, *arguments: str) -> str:
        return self.message_format.format(*arguments)


class Diagnostic(BaseModel):
    """A single finding reported by a rule (e.g. undisposed FileStream at line 42)."""

    rule_id: str
    severity: Severity
    location: Location
    message: str
    arguments: tuple[str, ...] = ()
    help_link: Optional[str] = None

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    def sort_key(self) -> tuple:
        loc = self.location
        return (self.rule_id, str(loc.path or ""), loc.line, loc.column, self.arguments)
