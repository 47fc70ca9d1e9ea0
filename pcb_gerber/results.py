from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from .ingest.layer_roles import RoleTag


ContentFormat = Literal["gerber", "excellon", "unknown"]
Units = Literal["mm", "inch"]
AnalysisStatus = Literal["complete", "complete_with_warnings", "failed"]


class Dimensions(BaseModel):
    """
    Board or layer extent in mm.
    """
    width: float = Field(gt=0)
    height: float = Field(gt=0)


class FileAnalysis(BaseModel):
    name: str = ""
    role: Optional[RoleTag] = None
    dimensions: Optional[Dimensions] = None
    min_trace_width: Optional[float] = Field(default=None, gt=0)
    min_hole_size: Optional[float] = Field(default=None, gt=0)
    has_gold_fingers: bool = False
    is_board_outline: bool = False
    content_format: ContentFormat = "unknown"
    units: Units = "mm"
    drill_hits: int = Field(default=0, ge=0)
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _outline_follows_role(self):
        if self.is_board_outline and self.role is not RoleTag.OUTLINE:
            raise ValueError("is_board_outline requires role=Outline")
        return self


class BoardAnalysisResult(BaseModel):
    dimensions: Optional[Dimensions] = None
    # One entry per copper file, duplicates kept: len() is the layer estimate.
    layer_roles: List[RoleTag] = Field(default_factory=list)
    file_types: List[str] = Field(default_factory=list)
    has_gold_fingers: bool = False
    has_vias: bool = False
    min_trace_width: Optional[float] = None
    min_hole_size: Optional[float] = None
    drill_count: Optional[int] = Field(default=None, ge=0)
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    @property
    def layer_count(self) -> int:
        return len(self.layer_roles)

    def estimated_layer_count(self, minimum: int = 2) -> int:
        """
        Copper layer count for quoting, never below `minimum`.

        Single-sided uploads and packages whose copper files could not be
        identified are still quoted as at least a two layer board.
        """
        return max(self.layer_count, minimum)

    @property
    def status(self) -> AnalysisStatus:
        if self.dimensions is None:
            return "failed"
        if self.errors or self.warnings:
            return "complete_with_warnings"
        return "complete"

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)

    @classmethod
    def from_json(cls, data: str) -> "BoardAnalysisResult":
        return cls.model_validate_json(data)
