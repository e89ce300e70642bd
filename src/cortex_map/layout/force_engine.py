"""
Force-directed layout engine for reconnaissance graphs.

Nodes repel each other, edges act as springs, and weak positional forces keep
the layout around the viewport center. The simulation is cooperative: each
call to :meth:`ForceSimulation.tick` advances one step, so the caller decides
when to redraw. Forces are computed with numpy over the whole node set.
"""

import logging
import math
import random
from typing import Any

import numpy as np

from ..shared.config import MapConfig
from ..shared.models import GraphData, NodeState
from .arena import BaseLayoutEngine, PositionArena

# Phyllotaxis seeding of initial positions
INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))

DISTANCE_MIN2 = 1.0


def charge_strength(node_count: int) -> float:
    """Many-body strength, attenuated logarithmically for dense graphs."""
    if node_count < 2:
        return -300.0
    return min(-300.0, -30.0 * math.log(node_count))


def link_distance(node_count: int) -> float:
    """Spring rest length; grows with graph size to declutter large graphs."""
    if node_count < 50:
        return 100.0
    if node_count < 100:
        return 120.0
    return 150.0


class ForceSimulation:
    """One run of the force simulation over one graph build.

    A simulation is bound to the graph it was created for. Once stopped it
    never writes to its arena again, so a stale tick for a discarded graph
    is a no-op.
    """

    def __init__(self, graph: GraphData, config: MapConfig | None = None):
        self.config = config or MapConfig()
        self.params = self.config.simulation
        self.logger = logging.getLogger(__name__)
        self.graph = graph
        self._rng = random.Random(self.params.seed)

        self.node_ids = [node.id for node in graph.nodes]
        self._index = {node_id: i for i, node_id in enumerate(self.node_ids)}
        node_count = len(self.node_ids)

        self.center = np.array(self.config.center, dtype=float)
        self.positions = self._initial_positions(node_count)
        self.velocities = np.zeros((node_count, 2))
        self.radii = np.array(
            [node.size * self.params.collision_padding for node in graph.nodes], dtype=float
        )
        self.fixed = np.zeros(node_count, dtype=bool)
        self.fixed_positions = np.zeros((node_count, 2))

        self.charge = charge_strength(node_count)
        self.distance = link_distance(node_count)
        self._init_links(graph)

        self.alpha = 1.0
        self.alpha_target = 0.0
        if self.params.alpha_decay is not None:
            self.alpha_decay = self.params.alpha_decay
        else:
            self.alpha_decay = 1 - self.params.alpha_min ** (1 / self.params.max_iterations)
        self.iterations = 0

        self._dragging: set[int] = set()
        self._cooldowns: dict[int, int] = {}
        self._running = node_count > 0
        self._cancelled = False

        self.arena = PositionArena()
        for node_id in self.node_ids:
            self.arena.set(node_id, NodeState())
        self._write_back()

    @property
    def is_running(self) -> bool:
        return self._running and not self._cancelled

    @property
    def is_stopped(self) -> bool:
        return self._cancelled

    @property
    def kinetic_energy(self) -> float:
        """Mean kinetic energy per free node."""
        free = ~self.fixed
        if not free.any():
            return 0.0
        return float(0.5 * np.mean(np.sum(self.velocities[free] ** 2, axis=1)))

    def _initial_positions(self, node_count: int) -> np.ndarray:
        index = np.arange(node_count)
        radius = INITIAL_RADIUS * np.sqrt(0.5 + index)
        angle = index * INITIAL_ANGLE
        return np.column_stack(
            (self.center[0] + radius * np.cos(angle), self.center[1] + radius * np.sin(angle))
        )

    def _init_links(self, graph: GraphData) -> None:
        pairs = [
            (self._index[edge.source], self._index[edge.target])
            for edge in graph.edges
            if edge.source in self._index
            and edge.target in self._index
            and edge.source != edge.target
        ]
        degree = np.zeros(len(self.node_ids))
        for source, target in pairs:
            degree[source] += 1
            degree[target] += 1

        self.link_sources = np.array([s for s, _ in pairs], dtype=int)
        self.link_targets = np.array([t for _, t in pairs], dtype=int)
        if pairs:
            source_degree = degree[self.link_sources]
            target_degree = degree[self.link_targets]
            self.link_bias = source_degree / (source_degree + target_degree)
            self.link_strength = 1.0 / np.minimum(source_degree, target_degree)
        else:
            self.link_bias = np.zeros(0)
            self.link_strength = np.zeros(0)

    def _jiggle(self) -> float:
        return (self._rng.random() - 0.5) * 1e-6

    def tick(self) -> bool:
        """Advance the simulation by one step.

        Returns:
            True while the simulation still has work to do
        """
        if not self.is_running:
            return False

        self.iterations += 1
        self.alpha += (self.alpha_target - self.alpha) * self.alpha_decay

        self._apply_links()
        self._apply_charge()
        self._apply_position()
        self._apply_collision()
        self._apply_centering()
        self._integrate()
        self._release_cooled_pins()
        self._write_back()

        if self._has_converged():
            self._running = False
            # Pins still cooling down do not outlive the run
            for index in self._cooldowns:
                self.fixed[index] = False
            self._cooldowns.clear()
            self._write_back()
            self.logger.debug(
                f"Simulation settled after {self.iterations} ticks "
                f"(alpha={self.alpha:.4f}, energy={self.kinetic_energy:.4f})"
            )
        return self._running

    def run(self) -> int:
        ticks = 0
        while self.tick():
            ticks += 1
        return ticks

    def stop(self) -> None:
        """Cancel the simulation; later ticks and drags do nothing."""
        self._cancelled = True
        self._running = False

    def _has_converged(self) -> bool:
        if self.iterations >= self.params.max_iterations:
            return True
        if self._dragging or self._cooldowns:
            return False
        return self.alpha < self.params.alpha_min or (
            self.kinetic_energy < self.params.energy_threshold
        )

    def _apply_links(self) -> None:
        positions, velocities = self.positions, self.velocities
        for i in range(len(self.link_sources)):
            source = self.link_sources[i]
            target = self.link_targets[i]
            dx = (
                positions[target, 0] + velocities[target, 0]
                - positions[source, 0] - velocities[source, 0]
            ) or self._jiggle()
            dy = (
                positions[target, 1] + velocities[target, 1]
                - positions[source, 1] - velocities[source, 1]
            ) or self._jiggle()
            length = math.hypot(dx, dy)
            factor = (length - self.distance) / length * self.alpha * self.link_strength[i]
            dx *= factor
            dy *= factor
            bias = self.link_bias[i]
            velocities[target, 0] -= dx * bias
            velocities[target, 1] -= dy * bias
            velocities[source, 0] += dx * (1 - bias)
            velocities[source, 1] += dy * (1 - bias)

    def _apply_charge(self) -> None:
        node_count = len(self.positions)
        if node_count < 2:
            return

        # delta[i, j] points from node i to node j
        delta = self.positions[np.newaxis, :, :] - self.positions[:, np.newaxis, :]
        dist2 = np.einsum("ijk,ijk->ij", delta, delta)
        np.fill_diagonal(dist2, np.inf)

        for i, j in zip(*np.nonzero(dist2 == 0), strict=True):
            if i < j:
                offset = np.array([self._jiggle(), self._jiggle()])
                delta[i, j] = offset
                delta[j, i] = -offset
                dist2[i, j] = dist2[j, i] = float(offset @ offset)

        dist2 = np.where(dist2 < DISTANCE_MIN2, np.sqrt(DISTANCE_MIN2 * dist2), dist2)
        weights = self.charge * self.alpha / dist2
        self.velocities += np.einsum("ij,ijk->ik", weights, delta)

    def _apply_position(self) -> None:
        strength = self.params.position_strength * self.alpha
        self.velocities += (self.center - self.positions) * strength

    def _apply_collision(self) -> None:
        node_count = len(self.positions)
        if node_count < 2:
            return

        predicted = self.positions + self.velocities
        # delta[i, j] points from node j to node i
        delta = predicted[:, np.newaxis, :] - predicted[np.newaxis, :, :]
        distance = np.sqrt(np.einsum("ijk,ijk->ij", delta, delta))
        reach = self.radii[:, np.newaxis] + self.radii[np.newaxis, :]
        overlap = distance < reach
        np.fill_diagonal(overlap, False)
        if not overlap.any():
            return

        safe = np.where(distance > 0, distance, 1.0)
        push = np.where(overlap, (reach - distance) / safe, 0.0)
        # The smaller node of a pair gives way more
        r2 = self.radii**2
        share = r2[np.newaxis, :] / (r2[:, np.newaxis] + r2[np.newaxis, :])
        self.velocities += np.einsum("ij,ijk->ik", push * share, delta)

    def _apply_centering(self) -> None:
        if len(self.positions) == 0:
            return
        self.positions -= self.positions.mean(axis=0) - self.center

    def _integrate(self) -> None:
        self.velocities *= 1 - self.params.velocity_decay
        free = ~self.fixed
        self.positions[free] += self.velocities[free]
        self.positions[self.fixed] = self.fixed_positions[self.fixed]
        self.velocities[self.fixed] = 0.0

    def _release_cooled_pins(self) -> None:
        for index in list(self._cooldowns):
            self._cooldowns[index] -= 1
            if self._cooldowns[index] <= 0:
                del self._cooldowns[index]
                self.fixed[index] = False

    def _write_back(self) -> None:
        for index, node_id in enumerate(self.node_ids):
            self._write_node(index, node_id)

    def _write_node(self, index: int, node_id: str) -> None:
        state = self.arena.get(node_id)
        if state is None:
            return
        state.x = float(self.positions[index, 0])
        state.y = float(self.positions[index, 1])
        state.vx = float(self.velocities[index, 0])
        state.vy = float(self.velocities[index, 1])
        if self.fixed[index]:
            state.fx = float(self.fixed_positions[index, 0])
            state.fy = float(self.fixed_positions[index, 1])
        else:
            state.fx = state.fy = None

    def _reheat(self) -> None:
        if self._cancelled:
            return
        if not self._running:
            self.iterations = 0
        self._running = True

    def drag_start(self, node_id: str) -> None:
        """Pin a node at its current position and reheat the simulation."""
        index = self._index.get(node_id)
        if index is None or self._cancelled:
            return
        self._dragging.add(index)
        self._cooldowns.pop(index, None)
        self.fixed[index] = True
        self.fixed_positions[index] = self.positions[index]
        self.alpha_target = self.params.alpha_target_on_drag
        self._reheat()
        self._write_node(index, node_id)

    def drag_to(self, node_id: str, x: float, y: float) -> None:
        index = self._index.get(node_id)
        if index is None or index not in self._dragging or self._cancelled:
            return
        self.fixed_positions[index] = (x, y)
        self.positions[index] = (x, y)
        self.velocities[index] = 0.0
        self._reheat()
        self._write_node(index, node_id)

    def drag_end(self, node_id: str) -> None:
        """Stop dragging; the pin is released after the cool-down ticks."""
        index = self._index.get(node_id)
        if index is None or index not in self._dragging or self._cancelled:
            return
        self._dragging.discard(index)
        if not self._dragging:
            self.alpha_target = 0.0

        # A settled run has no ticks left to count a cool-down
        if self.params.drag_cooldown_ticks > 0 and self._running:
            self._cooldowns[index] = self.params.drag_cooldown_ticks
        else:
            self.fixed[index] = False
            self._write_node(index, node_id)


class ForceDirectedEngine(BaseLayoutEngine):
    """Layout strategy backed by :class:`ForceSimulation`."""

    name = "force"

    def __init__(self, config: MapConfig | None = None):
        """Initialize the force-directed engine."""
        super().__init__()
        self.config = config or MapConfig()
        self.logger = logging.getLogger(__name__)
        self.simulation: ForceSimulation | None = None

    @property
    def is_running(self) -> bool:
        return self.simulation is not None and self.simulation.is_running

    def layout(self, graph: GraphData) -> PositionArena:
        """Start a new simulation for ``graph``, stopping the previous one.

        Args:
            graph: Graph to lay out

        Returns:
            The new simulation's position arena
        """
        self.stop()
        self.graph = graph
        self.simulation = ForceSimulation(graph, self.config)
        self.arena = self.simulation.arena
        self.logger.info(
            f"Started force simulation for {len(graph.nodes)} nodes "
            f"(charge={self.simulation.charge:.1f}, distance={self.simulation.distance:.0f})"
        )
        return self.arena

    def tick(self) -> bool:
        if self.simulation is None:
            return False
        return self.simulation.tick()

    def stop(self) -> None:
        if self.simulation is not None:
            self.simulation.stop()

    def drag_start(self, node_id: str) -> None:
        if self.simulation is not None:
            self.simulation.drag_start(node_id)

    def drag_to(self, node_id: str, x: float, y: float) -> None:
        if self.simulation is not None:
            self.simulation.drag_to(node_id, x, y)

    def drag_end(self, node_id: str) -> None:
        if self.simulation is not None:
            self.simulation.drag_end(node_id)

    def get_layout_config(self) -> dict[str, Any]:
        """Get the force parameters in effect for the current graph.

        Returns:
            Configuration dictionary describing the simulation
        """
        node_count = len(self.graph.nodes)
        params = self.config.simulation
        return {
            "simulation": {
                "charge": charge_strength(node_count),
                "linkDistance": link_distance(node_count),
                "collisionPadding": params.collision_padding,
                "positionStrength": params.position_strength,
                "velocityDecay": params.velocity_decay,
                "alphaMin": params.alpha_min,
                "maxIterations": params.max_iterations,
            },
            "drag": {
                "alphaTarget": params.alpha_target_on_drag,
                "cooldownTicks": params.drag_cooldown_ticks,
            },
        }
