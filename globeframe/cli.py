from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer

from globeframe.config import AppConfig
from globeframe.controller import MapController
from globeframe.geometry import build_farm_overlay
from globeframe.providers import build_provider
from globeframe.schemas import CameraPose, SceneConfig
from globeframe.session import MapSession
from globeframe.store import EntityStore
from globeframe.surface import InMemoryFactory, InMemorySurface

app = typer.Typer(help="Place markers and farm boundaries on a globe and frame them with the camera.")


def _load_scene(path: Path) -> SceneConfig:
    data = json.loads(path.read_text(encoding="utf-8"))
    return SceneConfig.model_validate(data)


async def _frame_scene(config: AppConfig) -> Optional[CameraPose]:
    scene = config.scene
    store = EntityStore()
    surface = InMemorySurface(heading=scene.heading)
    controller = MapController(
        surface,
        InMemoryFactory(),
        build_provider(scene.elevation),
        store,
        config=scene.framing,
    )
    session = MapSession(store, controller, padding=scene.padding, heading=scene.heading)
    session.start()
    try:
        store.set_rectangular_overlays(
            build_farm_overlay(farm.lat, farm.lng, farm.hectares, label=farm.label, color=farm.color)
            for farm in scene.farms
        )
        store.set_markers(scene.markers)
        await session.wait_idle()
    finally:
        session.stop()
    return surface.camera


@app.command()
def frame(
    input: Path = typer.Option(..., "--input", exists=True),
    provider: Optional[str] = typer.Option(None, "--provider"),
    api_key: Optional[str] = typer.Option(None, "--api-key"),
    verbose: bool = typer.Option(False, "--verbose"),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    scene = AppConfig.from_env(_load_scene(input)).scene
    if provider:
        scene.elevation.name = provider
    if api_key:
        scene.elevation.api_key = api_key
    config = AppConfig(scene=SceneConfig.model_validate(scene.model_dump()), verbose=verbose)
    pose = asyncio.run(_frame_scene(config))
    if pose is None:
        typer.echo("Nothing to frame.")
        return
    typer.echo(pose.model_dump_json(indent=2))


@app.command()
def corners(
    lat: float = typer.Option(..., "--lat"),
    lng: float = typer.Option(..., "--lng"),
    hectares: float = typer.Option(10.0, "--hectares"),
    label: Optional[str] = typer.Option(None, "--label"),
) -> None:
    if not -90 <= lat <= 90 or not -180 <= lng <= 180:
        raise typer.BadParameter("Invalid coordinates. Please provide a valid latitude/longitude.")
    overlay = build_farm_overlay(lat, lng, hectares, label=label)
    typer.echo(overlay.model_dump_json(indent=2))


@app.command()
def validate(input: Path = typer.Option(..., "--input", exists=True)) -> None:
    _ = _load_scene(input)
    typer.echo("Valid scene")
