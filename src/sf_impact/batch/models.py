"""Data models for multi-ticket batch aggregation."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _str_list(value: Any) -> List[str]:
    if not value or isinstance(value, Mapping):
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value if v]


@dataclass
class TicketChange:
    """What one ticket in a batch changes."""

    ticket_id: str
    summary: str = ""
    ticket_key: Optional[str] = None
    changes: List[str] = field(default_factory=list)
    change_type: Optional[str] = None
    object_names: List[str] = field(default_factory=list)
    field_names: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Mapping) -> "TicketChange":
        # Detection results may sit flat or under "metadata"
        meta = raw.get("metadata") if isinstance(raw.get("metadata"), Mapping) else {}

        def get(*keys: str) -> Any:
            for source in (raw, meta):
                for key in keys:
                    if source.get(key) is not None:
                        return source[key]
            return None

        return cls(
            ticket_id=str(get("ticketId", "ticket_id", "id") or ""),
            summary=str(get("summary") or ""),
            ticket_key=get("ticketKey", "ticket_key", "jiraKey"),
            changes=_str_list(get("changes")),
            change_type=get("changeType", "change_type"),
            object_names=_str_list(get("objectNames", "object_names")),
            field_names=_str_list(get("fieldNames", "field_names")),
        )


@dataclass
class BatchAnalysis:
    """Cross-ticket view of a batch."""

    conflicts: List[str] = field(default_factory=list)
    common_changes: List[str] = field(default_factory=list)
    execution_order: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "conflicts": list(self.conflicts),
            "commonChanges": list(self.common_changes),
            "executionOrder": list(self.execution_order),
        }


@dataclass
class BatchValidationResult:
    """Whether a batch can be processed, and why not."""

    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"isValid": self.is_valid, "errors": list(self.errors), "warnings": list(self.warnings)}


@dataclass
class BatchReport:
    """Analysis and validation of one batch, as shown to the user."""

    analysis: BatchAnalysis
    validation: BatchValidationResult

    def to_dict(self) -> Dict[str, Any]:
        return {"analysis": self.analysis.to_dict(), "validation": self.validation.to_dict()}
