"""
Verbatim Coder Data Models
Question groups, codeframes, coded responses and brand hierarchy configuration
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from errors import MalformedCodeframeError

# A raw cell from the uploaded spreadsheet
CellValue = Union[str, int, float, None]
RawTable = List[List[CellValue]]


class CodeframeStatus(Enum):
    """Lifecycle of a codeframe"""
    GENERATED = "generated"
    FINALIZED = "finalized"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class QuestionGroup:
    """A set of columns coded together with one codeframe"""
    group_id: str
    group_name: str
    question_type: str
    column_indices: List[int] = field(default_factory=list)

    def __post_init__(self):
        if not self.column_indices:
            raise ValueError(f"Question group '{self.group_id}' needs at least one column")


@dataclass
class CodeframeEntry:
    """A single code in a codeframe"""
    code: str
    label: str
    definition: str = ""
    examples: List[str] = field(default_factory=list)
    numeric: Optional[Union[int, str]] = None
    category: Optional[str] = None
    parent_code: Optional[str] = None
    is_parent: bool = False
    is_alias: bool = False
    percentage: float = 0.0

    def numeric_value(self) -> Optional[int]:
        """Numeric id as an int, or None when missing or non-numeric"""
        if self.numeric is None:
            return None
        try:
            return int(self.numeric)
        except (TypeError, ValueError):
            return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "numeric": self.numeric,
            "label": self.label,
            "definition": self.definition,
            "examples": list(self.examples),
            "category": self.category,
            "parentCode": self.parent_code,
            "isParent": self.is_parent,
            "isAlias": self.is_alias,
            "percentage": self.percentage,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CodeframeEntry":
        return cls(
            code=data["code"],
            label=data["label"],
            definition=data.get("definition") or "",
            examples=list(data.get("examples") or []),
            numeric=data.get("numeric"),
            category=data.get("category"),
            parent_code=data.get("parentCode"),
            is_parent=bool(data.get("isParent", False)),
            is_alias=bool(data.get("isAlias", False)),
            percentage=float(data.get("percentage") or 0.0),
        )


@dataclass
class Codeframe:
    """Codes generated for one question group, plus generation metadata"""
    group_id: str
    group_name: str
    question_type: str
    column_indices: List[int]
    entries: List[CodeframeEntry] = field(default_factory=list)
    sample_size: int = 0
    total_responses: int = 0
    generated_at: datetime = field(default_factory=utc_now)
    status: CodeframeStatus = CodeframeStatus.GENERATED
    finalized_at: Optional[datetime] = None

    @property
    def is_finalized(self) -> bool:
        return self.status == CodeframeStatus.FINALIZED

    def codes(self) -> List[str]:
        return [entry.code for entry in self.entries]

    def get_entry(self, code: str) -> Optional[CodeframeEntry]:
        return next((e for e in self.entries if e.code == code), None)

    def max_numeric(self) -> int:
        """Largest integer numeric id in use, 0 if none"""
        values = [e.numeric_value() for e in self.entries]
        return max((v for v in values if v is not None), default=0)

    def with_entries(self, entries: List[CodeframeEntry]) -> "Codeframe":
        return replace(self, entries=list(entries))

    def validate(self) -> None:
        """Check code uniqueness and that parent references resolve without cycles.

        Raises:
            MalformedCodeframeError: on the first violation found
        """
        by_code: Dict[str, CodeframeEntry] = {}
        for entry in self.entries:
            if entry.code in by_code:
                raise MalformedCodeframeError(f"duplicate code {entry.code!r}")
            by_code[entry.code] = entry

        for entry in self.entries:
            if entry.parent_code is None:
                continue
            if entry.parent_code not in by_code:
                raise MalformedCodeframeError(
                    f"code {entry.code!r} references missing parent {entry.parent_code!r}"
                )
            seen = {entry.code}
            current = by_code[entry.parent_code]
            while current is not None:
                if current.code in seen:
                    raise MalformedCodeframeError(f"parent cycle through {entry.code!r}")
                seen.add(current.code)
                current = by_code.get(current.parent_code) if current.parent_code else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON shape stored by the persistence layer"""
        data = {
            "groupId": self.group_id,
            "groupName": self.group_name,
            "questionType": self.question_type,
            "columns": list(self.column_indices),
            "codeframe": [entry.to_dict() for entry in self.entries],
            "sampleSize": self.sample_size,
            "totalResponses": self.total_responses,
            "generatedAt": self.generated_at.isoformat(),
            "status": self.status.value,
        }
        if self.finalized_at is not None:
            data["finalizedAt"] = self.finalized_at.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Codeframe":
        finalized_at = data.get("finalizedAt")
        return cls(
            group_id=data["groupId"],
            group_name=data.get("groupName", ""),
            question_type=data["questionType"],
            column_indices=list(data.get("columns") or []),
            entries=[CodeframeEntry.from_dict(e) for e in data.get("codeframe", [])],
            sample_size=int(data.get("sampleSize", 0)),
            total_responses=int(data.get("totalResponses", 0)),
            generated_at=datetime.fromisoformat(data["generatedAt"]),
            status=CodeframeStatus(data.get("status", CodeframeStatus.GENERATED.value)),
            finalized_at=datetime.fromisoformat(finalized_at) if finalized_at else None,
        )


@dataclass
class CodedResponse:
    """One respondent's answer with the codes assigned to it"""
    response_text: str
    row_index: int
    codes_assigned: List[str] = field(default_factory=list)
    column_name: Optional[str] = None
    column_index: Optional[int] = None


@dataclass
class BrandHierarchy:
    """A parent brand with its sub-brands and aliases"""
    parent_brand: str
    sub_brands: List[str] = field(default_factory=list)
    aliases: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parentBrand": self.parent_brand,
            "subBrands": list(self.sub_brands),
            "aliases": list(self.aliases),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BrandHierarchy":
        return cls(
            parent_brand=data["parentBrand"],
            sub_brands=list(data.get("subBrands") or []),
            aliases=list(data.get("aliases") or []),
        )


@dataclass
class BrandRollupConfig:
    """Per-project brand roll-up settings"""
    hierarchies: List[BrandHierarchy] = field(default_factory=list)
    rollup_enabled: bool = True
    preserve_sub_brands: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hierarchies": [h.to_dict() for h in self.hierarchies],
            "rollupEnabled": self.rollup_enabled,
            "preserveSubBrands": self.preserve_sub_brands,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BrandRollupConfig":
        return cls(
            hierarchies=[BrandHierarchy.from_dict(h) for h in data.get("hierarchies", [])],
            rollup_enabled=bool(data.get("rollupEnabled", True)),
            preserve_sub_brands=bool(data.get("preserveSubBrands", True)),
        )
