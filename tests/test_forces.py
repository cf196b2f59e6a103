# /tests/test_forces.py

import math
import unittest
import sys
import os

# Add root directory to path to allow imports from 'core'
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from core.config import Settings
from core.forces import CenterForce, CollideForce, LinkForce, ManyBodyForce, default_forces
from core.layout_state import DisplacementBuffer, LayoutEdge, LayoutNode
from core.models import NodeKind


def jiggle():
    return 1e-6


def make_nodes(*points, kind=NodeKind.REGION):
    return [LayoutNode(index=i, id=f"n{i}", kind=kind, x=x, y=y) for i, (x, y) in enumerate(points)]


def run_force(force, nodes, edges=(), alpha=1.0):
    edges = list(edges)
    force.initialize(nodes, edges, jiggle)
    buffer = DisplacementBuffer(len(nodes))
    force.apply(nodes, edges, alpha, buffer)
    return buffer


class TestLinkForce(unittest.TestCase):

    def test_stretched_link_pulls_endpoints_together(self):
        nodes = make_nodes((0.0, 0.0), (200.0, 0.0))

        buffer = run_force(LinkForce(distance=100.0), nodes, [LayoutEdge(0, 1, 1.0)])

        self.assertGreater(buffer.vx[0], 0)
        self.assertLess(buffer.vx[1], 0)
        # Equal degrees split the correction evenly: (200 - 100) / 200 * 200 / 2.
        self.assertAlmostEqual(buffer.vx[0], 50.0)
        self.assertAlmostEqual(buffer.vx[1], -50.0)

    def test_compressed_link_pushes_endpoints_apart(self):
        nodes = make_nodes((0.0, 0.0), (40.0, 0.0))

        buffer = run_force(LinkForce(distance=100.0), nodes, [LayoutEdge(0, 1, 1.0)])

        self.assertLess(buffer.vx[0], 0)
        self.assertGreater(buffer.vx[1], 0)

    def test_heavier_links_are_stiffer(self):
        light = run_force(LinkForce(), make_nodes((0.0, 0.0), (300.0, 0.0)), [LayoutEdge(0, 1, 0.25)])
        heavy = run_force(LinkForce(), make_nodes((0.0, 0.0), (300.0, 0.0)), [LayoutEdge(0, 1, 0.81)])

        self.assertGreater(abs(heavy.vx[0]), abs(light.vx[0]))

    def test_force_is_scaled_by_alpha(self):
        nodes = make_nodes((0.0, 0.0), (200.0, 0.0))
        edges = [LayoutEdge(0, 1, 1.0)]

        hot = run_force(LinkForce(), nodes, edges, alpha=1.0)
        cold = run_force(LinkForce(), nodes, edges, alpha=0.1)
        frozen = run_force(LinkForce(), nodes, edges, alpha=0.0)

        self.assertAlmostEqual(cold.vx[0], hot.vx[0] * 0.1)
        self.assertEqual(frozen.vx, [0.0, 0.0])

    def test_does_not_mutate_nodes(self):
        nodes = make_nodes((0.0, 0.0), (200.0, 0.0))

        run_force(LinkForce(iterations=3), nodes, [LayoutEdge(0, 1, 1.0)])

        self.assertEqual((nodes[0].x, nodes[0].vx, nodes[1].x, nodes[1].vx), (0.0, 0.0, 200.0, 0.0))


class TestManyBodyForce(unittest.TestCase):

    def test_two_nodes_repel(self):
        nodes = make_nodes((0.0, 0.0), (100.0, 0.0))

        buffer = run_force(ManyBodyForce(strength=-300.0), nodes)

        # strength * alpha / distance
        self.assertAlmostEqual(buffer.vx[0], -3.0, places=6)
        self.assertAlmostEqual(buffer.vx[1], 3.0, places=6)

    def test_small_theta_matches_pairwise_sum(self):
        points = [(13.0, 7.0), (250.0, 40.0), (-80.0, 120.0), (60.0, -200.0), (300.0, 310.0), (5.0, 90.0)]
        nodes = make_nodes(*points)

        buffer = run_force(ManyBodyForce(strength=-300.0, theta=1e-3), nodes, alpha=0.5)

        for i, (xi, yi) in enumerate(points):
            fx = fy = 0.0
            for j, (xj, yj) in enumerate(points):
                if i == j:
                    continue
                d2 = (xj - xi) ** 2 + (yj - yi) ** 2
                fx += (xj - xi) * -300.0 * 0.5 / d2
                fy += (yj - yi) * -300.0 * 0.5 / d2
            self.assertAlmostEqual(buffer.vx[i], fx, places=9)
            self.assertAlmostEqual(buffer.vy[i], fy, places=9)

    def test_barnes_hut_is_close_to_exact(self):
        points = [(math.cos(i) * (40 + 7 * i), math.sin(i * 1.3) * (30 + 5 * i)) for i in range(40)]
        exact = run_force(ManyBodyForce(theta=1e-3), make_nodes(*points))
        approx = run_force(ManyBodyForce(theta=0.9), make_nodes(*points))

        error = sum(math.hypot(exact.vx[i] - approx.vx[i], exact.vy[i] - approx.vy[i]) for i in range(len(points)))
        magnitude = sum(math.hypot(exact.vx[i], exact.vy[i]) for i in range(len(points)))
        self.assertLess(error / magnitude, 0.15)

    def test_coincident_nodes_are_separated(self):
        nodes = make_nodes((10.0, 10.0), (10.0, 10.0))

        buffer = run_force(ManyBodyForce(), nodes)

        for value in buffer.vx + buffer.vy:
            self.assertTrue(math.isfinite(value))
        self.assertNotEqual(buffer.vx[0], 0.0)

    def test_single_node_feels_nothing(self):
        buffer = run_force(ManyBodyForce(), make_nodes((1.0, 2.0)))

        self.assertEqual((buffer.vx, buffer.vy), ([0.0], [0.0]))


class TestCenterForce(unittest.TestCase):

    def test_shifts_centroid_toward_center(self):
        nodes = make_nodes((0.0, 0.0), (20.0, 20.0))

        buffer = run_force(CenterForce(x=0.0, y=0.0, strength=0.5), nodes)

        self.assertAlmostEqual(buffer.shift_x, -5.0)
        self.assertAlmostEqual(buffer.shift_y, -5.0)
        self.assertEqual(buffer.vx, [0.0, 0.0])

    def test_no_shift_when_centered(self):
        nodes = make_nodes((-10.0, 5.0), (10.0, -5.0))

        buffer = run_force(CenterForce(x=0.0, y=0.0), nodes)

        self.assertEqual((buffer.shift_x, buffer.shift_y), (0.0, 0.0))


class TestCollideForce(unittest.TestCase):

    def test_overlapping_nodes_are_pushed_apart(self):
        nodes = make_nodes((0.0, 0.0), (10.0, 0.0))

        buffer = run_force(CollideForce(margin=0.0, strength=0.7), nodes)

        # radii 12 + 12, overlap 14, equal sizes share the push.
        self.assertAlmostEqual(buffer.vx[0], -4.9, places=4)
        self.assertAlmostEqual(buffer.vx[1], 4.9, places=4)

    def test_distant_nodes_are_untouched(self):
        nodes = make_nodes((0.0, 0.0), (100.0, 0.0))

        buffer = run_force(CollideForce(margin=18.0), nodes)

        self.assertEqual(buffer.vx, [0.0, 0.0])

    def test_margin_widens_the_exclusion_zone(self):
        nodes = make_nodes((0.0, 0.0), (40.0, 0.0))

        without_margin = run_force(CollideForce(margin=0.0), nodes)
        with_margin = run_force(CollideForce(margin=18.0), nodes)

        self.assertEqual(without_margin.vx, [0.0, 0.0])
        self.assertLess(with_margin.vx[0], 0.0)

    def test_larger_node_moves_less(self):
        nodes = [
            LayoutNode(index=0, id="region", kind=NodeKind.REGION, x=0.0, y=0.0),
            LayoutNode(index=1, id="time", kind=NodeKind.TIME, x=10.0, y=0.0),
        ]

        buffer = run_force(CollideForce(margin=0.0), nodes)

        self.assertLess(abs(buffer.vx[0]), abs(buffer.vx[1]))

    def test_uses_predicted_positions(self):
        nodes = make_nodes((0.0, 0.0), (100.0, 0.0))
        nodes[1].vx = -95.0

        buffer = run_force(CollideForce(margin=0.0), nodes)

        self.assertGreater(buffer.vx[1], 0.0)


class TestDefaultForces(unittest.TestCase):

    def test_order_and_configuration(self):
        config = Settings(LINK_DISTANCE=80.0, CHARGE_STRENGTH=-150.0)

        forces = default_forces(config)

        self.assertEqual([force.name for force in forces], ["link", "charge", "center", "collide"])
        self.assertEqual(forces[0].distance, 80.0)
        self.assertEqual(forces[1].strength, -150.0)
        self.assertEqual((forces[2].x, forces[2].y), (config.CANVAS_WIDTH / 2, config.CANVAS_HEIGHT / 2))


if __name__ == '__main__':
    unittest.main()
