"""Unit tests for the interactive layout engine."""

import math
import random
from dataclasses import replace

import pytest
from pydantic import ValidationError

from conceptmap.models import CORE_ID, ConceptEdge, ConceptGraph, ConceptLevel, ConceptNode
from conceptmap.render.layout import (
    Body,
    ForceSimulation,
    PhysicsParams,
    PresentationState,
    clamp_to_canvas,
    node_radius,
    seed_positions,
    settle,
)


@pytest.fixture
def params() -> PhysicsParams:
    """Small canvas with a short settling budget."""
    return PhysicsParams(width=600, height=600, padding=30, iterations=60, major_radius=200)


@pytest.fixture
def simulation(three_detail_graph: ConceptGraph, params: PhysicsParams, rng: random.Random) -> ForceSimulation:
    """Simulation over three_detail_graph, collapsed."""
    return ForceSimulation(PresentationState(three_detail_graph), params, rng)


@pytest.fixture
def spoke_graph() -> ConceptGraph:
    """Five majors around the core, three details under "m2", hierarchy edges only."""
    core = ConceptNode(id=CORE_ID, label="Topic", level=ConceptLevel.CORE)
    majors = [ConceptNode(id=f"m{i}", label=f"Major {i}", level=ConceptLevel.MAJOR) for i in range(5)]
    details = [
        ConceptNode(id=f"d{i}", label=f"Detail {i}", level=ConceptLevel.DETAIL, parent_major_id="m2")
        for i in range(3)
    ]
    concepts = (*majors, *details)
    edges = tuple(
        ConceptEdge(source=CORE_ID, target=c.id, type="contains", implicit=True) for c in concepts
    )
    return ConceptGraph(title="Spokes", core=core, concepts=concepts, edges=edges)


def assert_in_bounds(simulation: ForceSimulation) -> None:
    params = simulation.params
    for body in simulation.bodies.values():
        assert params.padding <= body.x <= params.width - params.padding
        assert params.padding <= body.y <= params.height - params.padding


class TestPhysicsParams:
    """Tests for PhysicsParams validation."""

    def test_defaults_within_bounds(self) -> None:
        """Test defaults come from settings and validate."""
        params = PhysicsParams()
        assert set(params.tunables()) == {"repulsion", "link_distance", "gravity", "damping", "overlap_strength"}

    @pytest.mark.parametrize("field,value", [
        ("repulsion", 10.0),
        ("link_distance", 1000.0),
        ("gravity", -0.1),
        ("damping", 1.5),
        ("overlap_strength", 11.0),
    ])
    def test_out_of_range_rejected(self, field: str, value: float) -> None:
        """Test out-of-range construction raises."""
        with pytest.raises(ValidationError):
            PhysicsParams(**{field: value})

    def test_assignment_validated(self, params: PhysicsParams) -> None:
        """Test out-of-range assignment raises and leaves the value alone."""
        with pytest.raises(ValidationError):
            params.damping = 0.1
        assert params.damping == PhysicsParams().damping

    def test_padding_must_fit(self) -> None:
        """Test padding cannot swallow the canvas."""
        with pytest.raises(ValidationError):
            PhysicsParams(width=300, height=300, padding=150)


class TestNodeRadius:
    """Tests for node_radius."""

    def test_bands(self) -> None:
        """Test radius bands per level."""
        assert node_radius(ConceptNode(id=CORE_ID, label="c", level=ConceptLevel.CORE)) == 40.0
        assert node_radius(ConceptNode(id="m", label="m", level=ConceptLevel.MAJOR, occurrences=100)) == 42.0
        assert node_radius(ConceptNode(id="d", label="d", level=ConceptLevel.DETAIL)) == 20.0


class TestPresentationState:
    """Tests for expand/collapse and visibility."""

    def test_initially_collapsed(self, three_detail_graph: ConceptGraph) -> None:
        """Test only core and majors are visible at first."""
        state = PresentationState(three_detail_graph)
        assert state.visible_node_ids() == [CORE_ID, "m1", "m2"]
        assert [(e.source, e.target) for e in state.visible_edges()] == [
            (CORE_ID, "m1"), (CORE_ID, "m2"), ("m1", "m2"),
        ]

    def test_expand_reveals_exactly_children(self, three_detail_graph: ConceptGraph) -> None:
        """Test expanding a major reveals its own details and nothing else."""
        state = PresentationState(three_detail_graph)
        before = set(state.visible_node_ids())
        assert state.toggle("m1") is True
        revealed = set(state.visible_node_ids()) - before
        assert revealed == {"d1", "d2", "d3"}
        assert not state.is_visible("d4")

        assert state.toggle("m1") is False
        assert set(state.visible_node_ids()) == before

    def test_hidden_endpoint_hides_edge(self, three_detail_graph: ConceptGraph) -> None:
        """Test an edge shows only when both endpoints are visible."""
        state = PresentationState(three_detail_graph)
        state.expand("m1")
        pairs = {(e.source, e.target) for e in state.visible_edges()}
        assert ("d1", "d2") in pairs
        assert ("d3", "d4") not in pairs

        state.expand("m2")
        pairs = {(e.source, e.target) for e in state.visible_edges()}
        assert ("d3", "d4") in pairs
        assert all("ghost" not in pair for pair in pairs)

    def test_expand_all_and_collapse_all(self, three_detail_graph: ConceptGraph) -> None:
        """Test bulk expand and collapse."""
        state = PresentationState(three_detail_graph)
        state.expand_all()
        assert len(state.visible_node_ids()) == 7
        state.collapse_all()
        assert state.visible_node_ids() == [CORE_ID, "m1", "m2"]

    def test_one_edge_per_pair(self, three_detail_graph: ConceptGraph) -> None:
        """Test a reversed edge of another type over a drawn pair is dropped."""
        edges = (*three_detail_graph.edges, ConceptEdge(source="m2", target="m1", type="causes"))
        state = PresentationState(replace(three_detail_graph, edges=edges))
        between = [e for e in state.visible_edges() if {e.source, e.target} == {"m1", "m2"}]
        assert [(e.source, e.target, e.type) for e in between] == [("m1", "m2", "leads to")]

    @pytest.mark.parametrize("node_id", ["d1", CORE_ID, "missing"])
    def test_toggle_requires_major(self, three_detail_graph: ConceptGraph, node_id: str) -> None:
        """Test only majors can be toggled."""
        state = PresentationState(three_detail_graph)
        with pytest.raises(KeyError):
            state.toggle(node_id)
        with pytest.raises(KeyError):
            state.collapse(node_id)


class TestSeedPositions:
    """Tests for seed_positions and clamp_to_canvas."""

    def test_core_centered_and_first_major_on_top(
        self, three_detail_graph: ConceptGraph, params: PhysicsParams, rng: random.Random
    ) -> None:
        """Test the core is pinned at the centre and majors start at twelve o'clock."""
        bodies = seed_positions(PresentationState(three_detail_graph), params, rng)
        core = bodies[CORE_ID]
        assert (core.x, core.y) == (300.0, 300.0)
        assert core.pinned
        assert bodies["m1"].x == pytest.approx(300.0)
        assert bodies["m1"].y == pytest.approx(100.0)
        assert set(bodies) == {CORE_ID, "m1", "m2", "d1", "d2", "d3", "d4"}

    def test_clamp(self, params: PhysicsParams) -> None:
        """Test clamping stops motion into the wall."""
        body = Body(x=-50.0, y=900.0, radius=20.0, vx=-3.0, vy=4.0)
        clamp_to_canvas(body, params)
        assert (body.x, body.y) == (30.0, 570.0)
        assert (body.vx, body.vy) == (0.0, 0.0)


class TestForceSimulation:
    """Tests for the annealed simulation."""

    def test_run_stays_on_canvas(self, simulation: ForceSimulation) -> None:
        """Test every node stays within the padded canvas."""
        simulation.state.expand_all()
        assert simulation.run() == 60
        assert not simulation.running
        assert_in_bounds(simulation)

    def test_core_never_moves(self, simulation: ForceSimulation) -> None:
        """Test the pinned core keeps its position."""
        simulation.run()
        assert simulation.positions()[CORE_ID] == (300.0, 300.0)

    def test_restart_supersedes_previous_run(self, simulation: ForceSimulation) -> None:
        """Test only the latest generation advances."""
        first = simulation.restart(10)
        second = simulation.restart(10)
        assert second == first + 1
        assert simulation.tick(first) is False
        assert simulation.tick(second) is True

    def test_run_ends(self, simulation: ForceSimulation) -> None:
        """Test a burst stops after its step budget."""
        generation = simulation.restart(2)
        assert simulation.tick(generation) is True
        assert simulation.tick(generation) is False
        assert simulation.tick(generation) is False

    def test_temperature_cools(self, simulation: ForceSimulation) -> None:
        """Test temperature decays during a run and resets on restart."""
        simulation.run(10)
        assert simulation.temperature < 1.0
        simulation.restart()
        assert simulation.temperature == 1.0

    def test_drag_pins_node(self, simulation: ForceSimulation) -> None:
        """Test a dragged node is clamped, pinned and stays put."""
        simulation.drag("m1", -100.0, 5000.0)
        assert simulation.bodies["m1"].pinned
        assert simulation.positions()["m1"] == (30.0, 570.0)
        simulation.run()
        assert simulation.positions()["m1"] == (30.0, 570.0)

        simulation.release("m1")
        assert not simulation.bodies["m1"].pinned
        assert simulation.remaining == 20

    def test_toggle_uses_short_burst(self, simulation: ForceSimulation) -> None:
        """Test expand and collapse re-settle with a third of the step budget."""
        simulation.toggle("m1")
        assert simulation.remaining == simulation.short_burst == 20
        simulation.toggle("m1")
        assert simulation.remaining == 20
        simulation.toggle("m1", iterations=5)
        assert simulation.remaining == 5

    def test_detail_spring_anchored_to_major(self, simulation: ForceSimulation) -> None:
        """Test the hierarchy edge of a detail pulls toward its major."""
        edges = {e.target: e for e in simulation.state.graph.edges if e.implicit}
        assert simulation.spring_anchor(edges["d1"]) == "m1"
        assert simulation.spring_anchor(edges["m1"]) == CORE_ID
        relation = ConceptEdge(source="d1", target="d2", type="relates to")
        assert simulation.spring_anchor(relation) == "d1"

    def test_expanded_details_gather_round_their_major(self, spoke_graph: ConceptGraph) -> None:
        """Test details revealed by an expand settle nearer their own major than any other."""
        params = PhysicsParams(
            width=900, height=900, padding=40, iterations=300, major_radius=280,
            repulsion=8000, link_distance=160, gravity=0.01, damping=0.85,
        )
        simulation = ForceSimulation(PresentationState(spoke_graph), params, random.Random(3))
        simulation.run()
        generation = simulation.generation
        simulation.toggle("m2")
        assert simulation.generation == generation + 1
        while simulation.tick(simulation.generation):
            pass

        positions = simulation.positions()
        majors = [m.id for m in spoke_graph.majors]
        for detail in spoke_graph.details_of("m2"):
            x, y = positions[detail.id]
            nearest = min(majors, key=lambda m: math.hypot(positions[m][0] - x, positions[m][1] - y))
            assert nearest == "m2"

    def test_drag_core_ignored(self, simulation: ForceSimulation) -> None:
        """Test the core cannot be dragged."""
        simulation.drag(CORE_ID, 10.0, 10.0)
        assert simulation.positions()[CORE_ID] == (300.0, 300.0)

    def test_toggle_reseeds_details(self, simulation: ForceSimulation) -> None:
        """Test expanding reseeds details next to their major and restarts."""
        generation = simulation.generation
        assert simulation.toggle("m1") is True
        assert simulation.generation == generation + 1
        assert simulation.running
        m1 = simulation.bodies["m1"]
        for detail_id in ("d1", "d2", "d3"):
            d = simulation.bodies[detail_id]
            assert abs(d.x - m1.x) < 150 and abs(d.y - m1.y) < 150

    def test_reveal_requires_major(self, simulation: ForceSimulation) -> None:
        """Test revealing a non-major raises."""
        with pytest.raises(KeyError):
            simulation.reveal("d1")

    def test_update_params(self, simulation: ForceSimulation) -> None:
        """Test tunable changes are validated and restart the run."""
        simulation.update_params(gravity=0.05, repulsion=12000)
        assert simulation.params.gravity == 0.05
        assert simulation.running

        with pytest.raises(ValidationError):
            simulation.update_params(repulsion=1e9)
        with pytest.raises(KeyError):
            simulation.update_params(width=1000)


class TestSettle:
    """Tests for settle."""

    def test_deterministic_with_seed(self, three_detail_graph: ConceptGraph, params: PhysicsParams) -> None:
        """Test equal seeds give equal layouts."""
        first = settle(three_detail_graph, params, random.Random(7))
        second = settle(three_detail_graph, params, random.Random(7))
        assert first == second
        assert set(first) == {CORE_ID, "m1", "m2", "d1", "d2", "d3", "d4"}
