"""Configuration models for the visual comparison run."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class ViewportConfig(BaseModel):
    width: int = 1280
    height: int = 800
    name: str = "Desktop"


class EnvironmentConfig(BaseModel):
    base_url: str
    urls: list[str] = Field(default_factory=list)

    @field_validator("base_url", mode="before")
    @classmethod
    def resolve_env_base_url(cls, v: str) -> str:
        if isinstance(v, str) and v.startswith("env:"):
            env_var = v[4:]
            resolved = os.environ.get(env_var)
            if resolved is None:
                raise ValueError(f"Environment variable '{env_var}' not set")
            return resolved
        return v


class FrameworkConfig(BaseModel):
    # Environments
    environments: dict[str, EnvironmentConfig]
    reference: str = "prod"
    candidate: str = "staging"

    # Devices (one report per device)
    devices: list[ViewportConfig] = Field(default_factory=lambda: [ViewportConfig()])

    # Capture timing
    settle_timeout_seconds: float = 30.0
    capture_timeout_seconds: float = 90.0
    navigation_timeout_seconds: float = 60.0
    wait_until: str = "networkidle"
    # Applies to each device separately; N devices may take N times as long.
    run_timeout_seconds: float = 7200.0

    # Browser
    headless: bool = True
    user_agent: Optional[str] = None

    # Diff rendering
    diff_color: tuple[int, int, int] = (255, 0, 0)
    diff_alt_color: Optional[tuple[int, int, int]] = None

    # Reporting
    report_formats: list[str] = Field(default_factory=lambda: ["html", "json"])
    output_dir: str = "."

    @model_validator(mode="after")
    def check_environments(self) -> "FrameworkConfig":
        for name in (self.reference, self.candidate):
            if name not in self.environments:
                raise ValueError(f"Environment '{name}' is not configured")
        if self.reference == self.candidate:
            raise ValueError("Reference and candidate environments must differ")
        if self.settle_timeout_seconds >= self.capture_timeout_seconds:
            raise ValueError("settle_timeout_seconds must be shorter than capture_timeout_seconds")
        return self

    @property
    def reference_env(self) -> EnvironmentConfig:
        return self.environments[self.reference]

    @property
    def candidate_env(self) -> EnvironmentConfig:
        return self.environments[self.candidate]

    @property
    def page_paths(self) -> list[str]:
        """Ordered page paths, taken from the candidate environment."""
        return list(self.candidate_env.urls)

    def get_device(self, name: str) -> ViewportConfig:
        for device in self.devices:
            if device.name == name:
                return device
        raise KeyError(f"Device '{name}' is not configured")

    @classmethod
    def load(cls, path: str | Path) -> "FrameworkConfig":
        """Load config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)
