from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from globeframe.schemas import ElevationConfig, SceneConfig

ENV_ELEVATION_PROVIDER = "GLOBEFRAME_ELEVATION_PROVIDER"
ENV_ELEVATION_API_KEY = "GLOBEFRAME_ELEVATION_API_KEY"
ENV_ELEVATION_URL = "GLOBEFRAME_ELEVATION_URL"


@dataclass(frozen=True)
class AppConfig:
    scene: SceneConfig
    verbose: bool = False

    @property
    def elevation(self) -> ElevationConfig:
        return self.scene.elevation

    @classmethod
    def from_env(
        cls,
        scene: SceneConfig,
        env: Optional[Mapping[str, str]] = None,
        verbose: bool = False,
    ) -> "AppConfig":
        """Apply ``GLOBEFRAME_ELEVATION_*`` overrides on top of the scene file."""
        env = os.environ if env is None else env
        overrides = {}
        if env.get(ENV_ELEVATION_PROVIDER):
            overrides["name"] = env[ENV_ELEVATION_PROVIDER].strip().lower()
        if env.get(ENV_ELEVATION_API_KEY):
            overrides["api_key"] = env[ENV_ELEVATION_API_KEY]
        if env.get(ENV_ELEVATION_URL):
            overrides["url"] = env[ENV_ELEVATION_URL]
        if overrides:
            data = scene.model_dump()
            data["elevation"].update(overrides)
            scene = SceneConfig.model_validate(data)
        return cls(scene=scene, verbose=verbose)
