from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel, Field


class FrameReport(BaseModel):
    frame_index: int = Field(default=0, ge=0)
    pose_found: bool
    classification: Dict[str, float] = Field(default_factory=dict)
    label: Optional[str] = None
    rep_counts: Dict[str, int] = Field(default_factory=dict)
    rep_text: str = ""


class ReplaySummary(BaseModel):
    frames: int = Field(ge=0)
    frames_with_pose: int = Field(ge=0)
    rep_counts: Dict[str, int]
    last_rep_text: str
