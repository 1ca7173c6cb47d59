from __future__ import annotations

from pathlib import Path
from typing import Literal

from domain.types import Correction, ExtractConfig, Flip, FrameGeometry, ToneCurve, Transpose
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DeviceSettings(BaseModel):
    process_name: str = "xochitl"
    device_path: str = "/dev/fb0"
    mapping_pick: Literal["last", "after_last"] = "last"

    width: int = Field(1872, gt=0)
    height: int = Field(1404, gt=0)
    bytes_per_pixel: int = Field(2, gt=0)
    pixel_format: str = "gray16le"
    skip_correction: int = Field(7, ge=0)

    def geometry(self) -> FrameGeometry:
        return FrameGeometry(
            width=self.width,
            height=self.height,
            bytes_per_pixel=self.bytes_per_pixel,
            pixel_format=self.pixel_format,
            skip_correction=self.skip_correction,
        )


class DecodeSettings(BaseModel):
    adapter: Literal["ffmpeg", "numpy"] = "ffmpeg"
    ffmpeg_bin: str = "ffmpeg"
    timeout_s: float = 60.0

    # ffmpeg transpose mode; 2 = 90° counterclockwise
    transpose: Literal[0, 1, 2, 3] | None = 2
    hflip: bool = True
    curve: list[tuple[float, float]] = [(0.045, 0.0), (0.06, 1.0)]

    @field_validator("curve")
    @classmethod
    def _ascending(cls, v: list[tuple[float, float]]) -> list[tuple[float, float]]:
        xs = [x for x, _ in v]
        if xs != sorted(xs):
            raise ValueError("curve points must have ascending inputs")
        return v

    def corrections(self) -> tuple[Correction, ...]:
        out: list[Correction] = []
        if self.transpose is not None:
            out.append(Transpose(mode=self.transpose))
        if self.hflip:
            out.append(Flip(axis="h"))
        if self.curve:
            out.append(ToneCurve(points=tuple(self.curve)))
        return tuple(out)


class ExtractSettings(BaseModel):
    threshold: int = Field(200, ge=0, le=256)
    exclude_w: int = Field(200, ge=0)
    exclude_h: int = Field(200, ge=0)
    min_region_points: int = Field(100, ge=0)
    padding: int = Field(50, ge=0)
    floor_max_x: int = Field(150, ge=0)

    def config(self) -> ExtractConfig:
        return ExtractConfig(**self.model_dump())


class SshSettings(BaseModel):
    username: str = "root"
    port: int = 22
    password: str | None = None
    key_filename: str | None = None
    connect_timeout: float = 10.0
    command_timeout: float = 30.0
    auto_add_host_keys: bool = True


class SnapSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="RMS_", extra="ignore")

    host: str = "10.11.99.1"
    output_dir: Path = Path(".")
    keep_full: bool = True

    # caller-level policy: rerun the whole pipeline on a fatal error
    retries: int = Field(0, ge=0)
    retry_delay_s: float = 1.0

    device: DeviceSettings = DeviceSettings()
    decode: DecodeSettings = DecodeSettings()
    extract: ExtractSettings = ExtractSettings()
    ssh: SshSettings = SshSettings()
