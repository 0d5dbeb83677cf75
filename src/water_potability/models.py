from __future__ import annotations
from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


SAMPLE_FIELDS = (
    "ph",
    "hardness",
    "solids",
    "chloramines",
    "sulfate",
    "conductivity",
    "organic_carbon",
    "trihalomethanes",
    "turbidity",
)


class Category(str, Enum):
    GOOD = "Good"
    MODERATE = "Moderate"
    POOR = "Poor"


class CriterionStatus(str, Enum):
    OPTIMAL = "Optimal"
    ACCEPTABLE = "Acceptable"
    OUTSIDE = "Outside"


class ViolationKind(str, Enum):
    MISSING_FIELD = "missing_field"
    NOT_A_NUMBER = "not_a_number"
    OUT_OF_RANGE = "out_of_range"


@dataclass(frozen=True)
class Sample:
    ph: float
    hardness: float
    solids: float
    chloramines: float
    sulfate: float
    conductivity: float
    organic_carbon: float
    trihalomethanes: float
    turbidity: float

    def to_record(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class CriterionResult:
    field_name: str
    value: float
    status: CriterionStatus
    points: float
    max_points: float

    def to_record(self) -> dict:
        rec = asdict(self)
        rec["status"] = self.status.value
        return rec


@dataclass
class ScoreResult:
    score: float
    category: Category
    criteria: List[CriterionResult] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not 0.0 <= self.score <= 100.0:
            raise ValueError(f"score must lie in [0, 100], got {self.score!r}")


# =============================================================================
# Error values (returned, never raised across the public API)
# =============================================================================

@dataclass(frozen=True)
class FieldViolation:
    field_name: str
    reason: str
    kind: ViolationKind

    @property
    def message(self) -> str:
        return f"{self.field_name}: {self.reason}"


@dataclass(frozen=True)
class ValidationError:
    violations: List[FieldViolation]

    @property
    def message(self) -> str:
        missing = [v.field_name for v in self.violations if v.kind == ViolationKind.MISSING_FIELD]
        others = [v.message for v in self.violations if v.kind != ViolationKind.MISSING_FIELD]
        parts = []
        if missing:
            parts.append(f"Please fill in all required fields: {', '.join(missing)}")
        parts.extend(others)
        return "; ".join(parts)

    def to_records(self) -> List[dict]:
        return [
            {"field": v.field_name, "reason": v.reason, "kind": v.kind.value}
            for v in self.violations
        ]


@dataclass(frozen=True)
class ParseError:
    message: str
    source: str = ""


@dataclass(frozen=True)
class EmptyDatasetError:
    message: str = "Please upload a dataset or use the default dataset"


# =============================================================================
# Input modes and result payload
# =============================================================================

Dataset = List[Dict[str, Any]]


@dataclass(frozen=True)
class ManualEntry:
    fields: Dict[str, Any]

    mode_name = "form"


@dataclass(frozen=True)
class DatasetUpload:
    records: Dataset
    source: str = "upload"

    mode_name = "file"


InputMode = Union[ManualEntry, DatasetUpload]


@dataclass
class ResultPayload:
    category: Category
    score: float
    mode: str
    form_data: Optional[Dict[str, Any]] = None
    table_data: Optional[Dataset] = None

    def to_dict(self) -> dict:
        return {
            "prediction": self.category.value,
            "score": self.score,
            "mode": self.mode,
            "formData": self.form_data,
            "tableData": self.table_data,
        }

