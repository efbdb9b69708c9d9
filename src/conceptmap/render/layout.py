"""Headless force-directed layout for interactive concept maps.

Holds the presentation state layered on top of an immutable ConceptGraph
(expanded flags, coordinates, velocities) and the annealed force simulation
that positions the visible nodes. The browser script in html_template runs
the same step with the same constants; this module is the reference the
server uses to pre-settle the first frame and the tests use to check it.
"""

import logging
import math
import random
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, model_validator

from conceptmap.config import settings
from conceptmap.models import CORE_ID, ConceptEdge, ConceptGraph, ConceptLevel, ConceptNode, dedupe_edges

logger = logging.getLogger(__name__)

# Spring stiffness along visible edges
SPRING_STRENGTH = 0.04

# Speed limit per step, keeps early high-temperature steps from overshooting
MAX_SPEED = 40.0

# Distances below this are treated as coincident and nudged apart
MIN_DISTANCE = 0.5

# Slider ranges for the tunable parameters: (min, max, step)
PARAM_BOUNDS: dict[str, tuple[float, float, float]] = {
    "repulsion": (500.0, 40000.0, 500.0),
    "link_distance": (40.0, 400.0, 10.0),
    "gravity": (0.0, 0.1, 0.005),
    "damping": (0.5, 0.99, 0.01),
    "overlap_strength": (0.0, 10.0, 0.5),
}


class PhysicsParams(BaseModel):
    """
    Simulation parameters.

    Out-of-range values raise a ValidationError, on construction and on
    assignment; nothing is clamped behind the caller's back.
    """

    model_config = ConfigDict(validate_assignment=True)

    # Tunable from the UI
    repulsion: float = Field(
        default_factory=lambda: settings.physics_repulsion,
        ge=PARAM_BOUNDS["repulsion"][0], le=PARAM_BOUNDS["repulsion"][1],
    )
    link_distance: float = Field(
        default_factory=lambda: settings.physics_link_distance,
        ge=PARAM_BOUNDS["link_distance"][0], le=PARAM_BOUNDS["link_distance"][1],
    )
    gravity: float = Field(
        default_factory=lambda: settings.physics_gravity,
        ge=PARAM_BOUNDS["gravity"][0], le=PARAM_BOUNDS["gravity"][1],
    )
    damping: float = Field(
        default_factory=lambda: settings.physics_damping,
        ge=PARAM_BOUNDS["damping"][0], le=PARAM_BOUNDS["damping"][1],
    )
    overlap_strength: float = Field(
        default_factory=lambda: settings.physics_overlap_strength,
        ge=PARAM_BOUNDS["overlap_strength"][0], le=PARAM_BOUNDS["overlap_strength"][1],
    )

    # Fixed per document
    width: int = Field(default_factory=lambda: settings.canvas_width, ge=200)
    height: int = Field(default_factory=lambda: settings.canvas_height, ge=200)
    padding: float = Field(default_factory=lambda: settings.canvas_padding, ge=0)
    node_margin: float = Field(default=12.0, ge=0)
    hierarchy_rest_factor: float = Field(default=0.6, gt=0, le=1)
    iterations: int = Field(default_factory=lambda: settings.physics_iterations, ge=1, le=5000)
    cooling: float = Field(default_factory=lambda: settings.physics_cooling, gt=0, le=1)
    major_radius: float = Field(default_factory=lambda: settings.major_radius, gt=0)
    detail_jitter: float = Field(default_factory=lambda: settings.detail_jitter, ge=0)

    @model_validator(mode="after")
    def _check_padding(self) -> "PhysicsParams":
        if self.padding * 2 >= min(self.width, self.height):
            raise ValueError("padding must leave room on the canvas")
        return self

    @property
    def center(self) -> tuple[float, float]:
        return self.width / 2, self.height / 2

    def tunables(self) -> dict[str, float]:
        return {name: getattr(self, name) for name in PARAM_BOUNDS}


def node_radius(node: ConceptNode) -> float:
    """Drawn radius of a node, growing with occurrences within a per-level band."""
    if node.level == ConceptLevel.CORE:
        return 40.0
    if node.level == ConceptLevel.MAJOR:
        return max(28.0, min(28.0 + node.occurrences * 1.5, 42.0))
    return max(20.0, min(20.0 + node.occurrences * 1.2, 32.0))


@dataclass
class Body:
    """Mutable physical state of one node."""

    x: float
    y: float
    radius: float
    vx: float = 0.0
    vy: float = 0.0
    pinned: bool = False


class PresentationState:
    """Expand/collapse flags and the visible node and edge sets."""

    def __init__(self, graph: ConceptGraph):
        self.graph = graph
        self.expanded: dict[str, bool] = {m.id: False for m in graph.majors}

    def children_of(self, major_id: str) -> list[str]:
        return [d.id for d in self.graph.details_of(major_id)]

    def is_visible(self, node_id: str) -> bool:
        node = self.graph.get(node_id)
        if node is None:
            return False
        if node.level != ConceptLevel.DETAIL:
            return True
        return self.expanded.get(node.parent_major_id or "", False)

    def visible_node_ids(self) -> list[str]:
        """Visible ids in graph order: core, every major, details of expanded majors."""
        return [n.id for n in self.graph.nodes if self.is_visible(n.id)]

    def visible_edges(self) -> list[ConceptEdge]:
        """Deduplicated edges whose endpoints both exist and are visible."""
        return [
            e for e in dedupe_edges(self.graph.edges)
            if self.is_visible(e.source) and self.is_visible(e.target)
        ]

    def _require_major(self, major_id: str) -> None:
        if major_id not in self.expanded:
            raise KeyError(f"Not a major concept: {major_id}")

    def toggle(self, major_id: str) -> bool:
        """Flip a major's expanded flag; returns the new value."""
        self._require_major(major_id)
        self.expanded[major_id] = not self.expanded[major_id]
        return self.expanded[major_id]

    def expand(self, major_id: str) -> None:
        self._require_major(major_id)
        self.expanded[major_id] = True

    def collapse(self, major_id: str) -> None:
        self._require_major(major_id)
        self.expanded[major_id] = False

    def expand_all(self) -> None:
        for major_id in self.expanded:
            self.expanded[major_id] = True

    def collapse_all(self) -> None:
        for major_id in self.expanded:
            self.expanded[major_id] = False


def clamp_to_canvas(body: Body, params: PhysicsParams) -> None:
    """Keep a body within the canvas minus padding, stopping motion into the wall."""
    low_x, high_x = params.padding, params.width - params.padding
    low_y, high_y = params.padding, params.height - params.padding
    if body.x < low_x or body.x > high_x:
        body.x = min(max(body.x, low_x), high_x)
        body.vx = 0.0
    if body.y < low_y or body.y > high_y:
        body.y = min(max(body.y, low_y), high_y)
        body.vy = 0.0


def seed_positions(
    state: PresentationState,
    params: PhysicsParams | None = None,
    rng: random.Random | None = None,
) -> dict[str, Body]:
    """
    Initial placement for every node, visible or not.

    Core at the canvas centre (pinned), majors evenly spaced on a circle of
    params.major_radius starting at twelve o'clock, details just outside their
    major with random jitter.
    """
    params = params or PhysicsParams()
    rng = rng or random.Random()
    cx, cy = params.center
    graph = state.graph

    bodies: dict[str, Body] = {
        graph.core.id: Body(x=cx, y=cy, radius=node_radius(graph.core), pinned=True)
    }

    majors = graph.majors
    for i, major in enumerate(majors):
        angle = 2 * math.pi * i / len(majors) - math.pi / 2
        bodies[major.id] = Body(
            x=cx + params.major_radius * math.cos(angle),
            y=cy + params.major_radius * math.sin(angle),
            radius=node_radius(major),
        )

    for detail in graph.details:
        bodies[detail.id] = _seed_near_parent(detail, bodies, params, rng)

    for body in bodies.values():
        clamp_to_canvas(body, params)
    return bodies


def _seed_near_parent(
    detail: ConceptNode, bodies: dict[str, Body], params: PhysicsParams, rng: random.Random
) -> Body:
    cx, cy = params.center
    parent = bodies.get(detail.parent_major_id or "", bodies[CORE_ID])

    # Push outward from the core so details do not start on top of their major
    dx, dy = parent.x - cx, parent.y - cy
    dist = math.hypot(dx, dy) or 1.0
    offset = parent.radius + params.node_margin + node_radius(detail)
    return Body(
        x=parent.x + dx / dist * offset + rng.uniform(-params.detail_jitter, params.detail_jitter),
        y=parent.y + dy / dist * offset + rng.uniform(-params.detail_jitter, params.detail_jitter),
        radius=node_radius(detail),
    )


class ForceSimulation:
    """
    Annealed force simulation over the visible nodes.

    A run is a budget of steps with a cooling temperature. restart() bumps
    the generation counter, which invalidates any run still in progress, so
    only the most recent run advances.
    """

    def __init__(
        self,
        state: PresentationState,
        params: PhysicsParams | None = None,
        rng: random.Random | None = None,
        bodies: dict[str, Body] | None = None,
    ):
        self.state = state
        self.params = params or PhysicsParams()
        self.rng = rng or random.Random()
        self.bodies = bodies if bodies is not None else seed_positions(state, self.params, self.rng)
        self.generation = 0
        self.temperature = 1.0
        self._remaining = 0

    @property
    def running(self) -> bool:
        return self._remaining > 0

    @property
    def remaining(self) -> int:
        """Steps left in the current run."""
        return self._remaining

    @property
    def short_burst(self) -> int:
        """Step budget for re-settling after an expand, collapse or drop."""
        return max(1, self.params.iterations // 3)

    def positions(self) -> dict[str, tuple[float, float]]:
        return {node_id: (b.x, b.y) for node_id, b in self.bodies.items()}

    def spring_anchor(self, edge: ConceptEdge) -> str:
        """
        Node the spring of an edge pulls toward.

        The hierarchy edge of a detail is sprung from its major rather than
        the core, so revealed details settle around their parent.
        """
        if edge.implicit:
            node = self.state.graph.get(edge.target)
            if node is not None and node.parent_major_id and self.state.is_visible(node.parent_major_id):
                return node.parent_major_id
        return edge.source

    def step(self) -> None:
        """Advance one step: repulsion, springs, gravity, damping, clamping."""
        params = self.params
        ids = self.state.visible_node_ids()
        forces = {node_id: [0.0, 0.0] for node_id in ids}

        for i, a_id in enumerate(ids):
            a = self.bodies[a_id]
            for b_id in ids[i + 1:]:
                b = self.bodies[b_id]
                dx, dy = b.x - a.x, b.y - a.y
                dist = math.hypot(dx, dy)
                if dist < MIN_DISTANCE:
                    angle = self.rng.uniform(0, 2 * math.pi)
                    dx, dy, dist = math.cos(angle) * MIN_DISTANCE, math.sin(angle) * MIN_DISTANCE, MIN_DISTANCE

                force = params.repulsion / (dist * dist)
                min_gap = a.radius + b.radius + params.node_margin
                if dist < min_gap:
                    force += params.overlap_strength * (min_gap - dist)

                fx, fy = force * dx / dist, force * dy / dist
                forces[a_id][0] -= fx
                forces[a_id][1] -= fy
                forces[b_id][0] += fx
                forces[b_id][1] += fy

        for edge in self.state.visible_edges():
            anchor = self.spring_anchor(edge)
            a, b = self.bodies[anchor], self.bodies[edge.target]
            dx, dy = b.x - a.x, b.y - a.y
            dist = math.hypot(dx, dy) or MIN_DISTANCE
            rest = params.link_distance * (params.hierarchy_rest_factor if edge.implicit else 1.0)
            force = SPRING_STRENGTH * (dist - rest)
            fx, fy = force * dx / dist, force * dy / dist
            forces[anchor][0] += fx
            forces[anchor][1] += fy
            forces[edge.target][0] -= fx
            forces[edge.target][1] -= fy

        cx, cy = params.center
        for node_id in ids:
            body = self.bodies[node_id]
            if body.pinned:
                body.vx = body.vy = 0.0
                continue

            fx = forces[node_id][0] + (cx - body.x) * params.gravity
            fy = forces[node_id][1] + (cy - body.y) * params.gravity
            body.vx = (body.vx + fx * self.temperature) * params.damping
            body.vy = (body.vy + fy * self.temperature) * params.damping

            speed = math.hypot(body.vx, body.vy)
            if speed > MAX_SPEED:
                body.vx *= MAX_SPEED / speed
                body.vy *= MAX_SPEED / speed

            body.x += body.vx
            body.y += body.vy
            clamp_to_canvas(body, params)

    def restart(self, iterations: int | None = None) -> int:
        """Cancel any run in progress and start a fresh burst; returns its generation."""
        self.generation += 1
        self._remaining = iterations if iterations is not None else self.params.iterations
        self.temperature = 1.0
        return self.generation

    def tick(self, generation: int) -> bool:
        """
        Advance the run identified by generation by one step.

        Returns False once that run is finished or has been superseded.
        """
        if generation != self.generation or self._remaining <= 0:
            return False
        self.step()
        self._remaining -= 1
        self.temperature *= self.params.cooling
        return self._remaining > 0

    def run(self, iterations: int | None = None) -> int:
        """Run a complete burst synchronously; returns the number of steps taken."""
        generation = self.restart(iterations)
        steps = 0
        while self._remaining > 0 and generation == self.generation:
            self.tick(generation)
            steps += 1
        logger.debug(f"Settled {len(self.state.visible_node_ids())} nodes in {steps} steps")
        return steps

    def reveal(self, major_id: str) -> None:
        """Re-seed a major's details next to it, ready for expansion."""
        parent = self.state.graph.get(major_id)
        if parent is None or parent.level != ConceptLevel.MAJOR:
            raise KeyError(f"Not a major concept: {major_id}")
        for detail in self.state.graph.details_of(major_id):
            body = _seed_near_parent(detail, self.bodies, self.params, self.rng)
            clamp_to_canvas(body, self.params)
            self.bodies[detail.id] = body

    def toggle(self, major_id: str, iterations: int | None = None) -> bool:
        """Expand or collapse a major and restart a short settling burst."""
        expanded = self.state.toggle(major_id)
        if expanded:
            self.reveal(major_id)
        self.restart(iterations if iterations is not None else self.short_burst)
        return expanded

    def drag(self, node_id: str, x: float, y: float) -> None:
        """Move a node to the pointer and pin it there."""
        body = self.bodies[node_id]
        if node_id == CORE_ID:
            return
        body.x, body.y = x, y
        body.vx = body.vy = 0.0
        body.pinned = True
        clamp_to_canvas(body, self.params)

    def release(self, node_id: str, iterations: int | None = None) -> None:
        """Unpin a dragged node and let the layout re-settle."""
        if node_id != CORE_ID:
            self.bodies[node_id].pinned = False
        self.restart(iterations if iterations is not None else self.short_burst)

    def update_params(self, **changes: float) -> None:
        """Apply new tunable values (validated) and restart the burst."""
        for name, value in changes.items():
            if name not in PARAM_BOUNDS:
                raise KeyError(f"Unknown physics parameter: {name}")
            setattr(self.params, name, value)
        self.restart()


def settle(
    graph: ConceptGraph,
    params: PhysicsParams | None = None,
    rng: random.Random | None = None,
) -> dict[str, tuple[float, float]]:
    """Positions of every node after settling the initial, collapsed view."""
    simulation = ForceSimulation(PresentationState(graph), params, rng)
    simulation.run()
    return simulation.positions()
