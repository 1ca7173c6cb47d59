from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class BoxOut(BaseModel):
    min_x: int
    min_y: int
    max_x: int
    max_y: int


class SnapReport(BaseModel):
    api: Literal["v1"] = "v1"
    status: Literal["cropped", "no_content"]
    pid: str
    base_address: int
    full_path: str | None = None
    cropped_path: str | None = None
    box: BoxOut | None = None
    found_regions: int = 0
    kept_regions: int = 0
