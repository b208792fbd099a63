"""Plain-data frame description handed to whatever draws the scene."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from agrarian_sim.core.config import (
    COLLECTIVE_FARM_COLOR,
    DISPLACED_PERSON_COLOR,
    FARM_MARKER_AREA_DIVISOR,
    FARM_MARKER_BASE_RADIUS,
    FARM_MARKER_MAX_EXTRA,
    GRAIN_OVERLAY_SCALE,
    MAX_PERSON_MARKERS,
    OVERLAY_ALPHA,
    OVERLAY_COLORS,
    PERSON_COLOR,
    PRIVATE_FARM_COLOR,
)
from agrarian_sim.simulation.metrics import SimulationMetrics
from agrarian_sim.view.picking import Marker


@dataclass
class FarmSprite:
    id: str
    sx: float
    sy: float
    radius: float
    color: int
    famine_ring_alpha: float
    selected: bool = False
    heat: float = 0.0
    heat_color: Optional[int] = None
    heat_alpha: float = 0.0


@dataclass
class PersonSprite:
    id: str
    sx: float
    sy: float
    color: int
    selected: bool = False


@dataclass
class HudState:
    level_name: str
    level_scale: float
    user_zoom: float
    era_name: str
    date_iso: str
    era_progress: float
    playing: bool
    fast_forward: bool
    overlay: str
    metrics: SimulationMetrics

    def lines(self) -> list[str]:
        """Text lines as shown in the status panel."""
        m = self.metrics
        state = "playing" if self.playing else "paused"
        if self.fast_forward:
            state += " x fast"
        return [
            f"{self.era_name} | {self.date_iso} | {self.era_progress:.0%} through era | {state}",
            f"Level: {self.level_name} (scale {self.level_scale:.3f}) | Zoom: {self.user_zoom:.2f}",
            f"Grain: {m.total_grain_today:.1f} | Livestock: {m.total_livestock_est:.0f} | "
            f"Avg Morale: {m.avg_morale:.2f} | Displaced: {m.displaced_count} | "
            f"Collectivized: {m.farms_collectivized} | Req Grain: {m.grain_requisitioned:.1f}",
        ]


@dataclass
class FrameState:
    hud: HudState
    farms: list[FarmSprite] = field(default_factory=list)
    persons: list[PersonSprite] = field(default_factory=list)
    selection: Optional[dict] = None


def farm_radius(land_area: float) -> float:
    return FARM_MARKER_BASE_RADIUS + min(FARM_MARKER_MAX_EXTRA, land_area / FARM_MARKER_AREA_DIVISOR)


def overlay_heat(sim: "Simulation", farm: "Farm", overlay: str) -> float:  # noqa: F821
    """Overlay metric for one farm, in [0, 1]; 0 when no overlay is active."""
    if overlay == "grain":
        value = farm.last_yield / GRAIN_OVERLAY_SCALE
    elif overlay == "morale":
        value = sim.farm_morale(farm.id)
    elif overlay == "famine_risk":
        value = farm.famine_risk
    else:
        return 0.0
    return max(0.0, min(1.0, value))


def describe_selection(sim: "Simulation", selection: Optional[Marker]) -> Optional[dict]:  # noqa: F821
    """Fields for the selection panel, or None for nothing/unknown."""
    if selection is None:
        return None
    if selection.kind == "farm":
        farm = sim.farms.get(selection.id)
        if farm is None:
            return None
        return {
            "type": "farm",
            "id": farm.id,
            "name": farm.name,
            "mode": farm.ownership_mode,
            "area": round(farm.land_area, 0),
            "mechanization": round(farm.mechanization_level, 2),
            "famine_risk": round(farm.famine_risk, 2),
            "avg30_yield": round(farm.avg_30_day_yield(), 1),
            "stored_grain": round(farm.stored_grain, 1),
        }
    if selection.kind == "person":
        person = sim.persons.get(selection.id)
        if person is None:
            return None
        return {
            "type": "person",
            "id": person.id,
            "name": person.name,
            "age": person.age,
            "morale": round(person.morale, 2),
            "health": round(person.health, 2),
            "skill": round(person.labor_skill, 2),
            "displaced": person.displaced,
        }
    return {"type": selection.kind, "id": selection.id, "name": selection.name}


def build_frame_state(session: "Session") -> FrameState:  # noqa: F821
    sim = session.simulation
    clock = session.clock
    levels = session.levels
    camera = session.camera
    vw, vh = session.viewport
    scale = levels.interpolated_scale()
    selected_id = session.selection.id if session.selection is not None else None

    hud = HudState(
        level_name=levels.interpolated_name(),
        level_scale=scale,
        user_zoom=camera.user_zoom,
        era_name=clock.current_era.name,
        date_iso=clock.date.isoformat(),
        era_progress=clock.era_progress(),
        playing=session.playing,
        fast_forward=session.fast_forward,
        overlay=session.overlay,
        metrics=sim.metrics,
    )

    farms: list[FarmSprite] = []
    for farm in sim.farms.values():
        sx, sy = camera.world_to_screen(farm.x, farm.y, scale, vw, vh)
        sprite = FarmSprite(
            id=farm.id,
            sx=sx,
            sy=sy,
            radius=farm_radius(farm.land_area),
            color=PRIVATE_FARM_COLOR if farm.is_private else COLLECTIVE_FARM_COLOR,
            famine_ring_alpha=farm.famine_risk,
            selected=farm.id == selected_id,
        )
        if session.overlay in OVERLAY_COLORS:
            sprite.heat = overlay_heat(sim, farm, session.overlay)
            sprite.heat_color = OVERLAY_COLORS[session.overlay]
            sprite.heat_alpha = OVERLAY_ALPHA * sprite.heat
        farms.append(sprite)

    persons: list[PersonSprite] = []
    if levels.current_level.id == "house":
        for marker in session.entities.persons[:MAX_PERSON_MARKERS]:
            person = sim.persons.get(marker.id)
            if person is None:
                continue
            sx, sy = camera.world_to_screen(marker.x, marker.y, scale, vw, vh)
            persons.append(PersonSprite(
                id=person.id,
                sx=sx,
                sy=sy,
                color=DISPLACED_PERSON_COLOR if person.displaced else PERSON_COLOR,
                selected=person.id == selected_id,
            ))

    return FrameState(
        hud=hud,
        farms=farms,
        persons=persons,
        selection=describe_selection(sim, session.selection),
    )
