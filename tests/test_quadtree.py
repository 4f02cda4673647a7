"""Tests for QuadTree implementation and Barnes-Hut force approximation."""

import random

import numpy as np
import pytest

from barnes_hut import SimulationConfig
from barnes_hut.metrics import direct_forces
from barnes_hut.physics import Body, random_bodies
from barnes_hut.spatial import ForceStats, Quadrant, QuadTree, QuadTreeNode, Region
from barnes_hut.validation import InvalidParameterError

# =============================================================================
# Helpers
# =============================================================================


def build_tree(bodies, extent=100.0, theta=0.5, softening=3.0, max_depth=32):
    """Build a tree over [0, extent]^2 and insert all bodies."""
    tree = QuadTree(
        Region(0.0, 0.0, extent),
        theta=theta,
        softening=softening,
        max_depth=max_depth,
    )
    for body in bodies:
        tree.insert(body)
    return tree


def tree_forces(tree, bodies, stats=None):
    """Reset and accumulate tree forces on every body; return (n, 2) array."""
    for body in bodies:
        body.reset_force()
        tree.update_force(body, stats)
    return np.array([(b.fx, b.fy) for b in bodies])


def leaf_bodies(tree):
    """All bodies held by external nodes, in traversal order."""
    return [b for node in tree.nodes() if node.is_external() for b in node.bodies]


def aggregates_by_region(tree):
    """Map each node's region to its (mass, com_x, com_y)."""
    return {
        node.region: (node.total_mass, node.center_of_mass_x, node.center_of_mass_y)
        for node in tree.nodes()
        if node.total_mass > 0
    }


# =============================================================================
# Node tests
# =============================================================================


class TestQuadTreeNode:
    """Tests for QuadTreeNode."""

    def test_node_creation(self):
        """A new node is empty and external."""
        node = QuadTreeNode(Region(0.0, 0.0, 100.0))
        assert node.is_empty()
        assert node.is_external()
        assert node.total_mass == 0.0
        assert node.body is None

    def test_insert_into_empty_node(self):
        """The first body is stored directly with its own mass and position."""
        node = QuadTreeNode(Region(0.0, 0.0, 100.0))
        body = Body(30.0, 40.0, mass=2.0)

        assert node.insert(body)
        assert node.body is body
        assert node.is_external()
        assert node.total_mass == 2.0
        assert node.center_of_mass_x == 30.0
        assert node.center_of_mass_y == 40.0

    def test_second_body_subdivides(self):
        """A second body turns the leaf into an internal node with four children."""
        node = QuadTreeNode(Region(0.0, 0.0, 100.0))
        a = Body(25.0, 25.0)
        b = Body(75.0, 75.0)
        node.insert(a)
        node.insert(b)

        assert not node.is_external()
        assert node.bodies == []
        assert node.children is not None
        assert len(node.children) == 4
        assert node.child(Quadrant.NW).body is a
        assert node.child(Quadrant.SE).body is b
        assert node.child(Quadrant.NE).is_empty()
        assert node.child(Quadrant.SW).is_empty()

    def test_never_partially_subdivided(self):
        """Every node has either zero or four children."""
        tree = build_tree(random_bodies(60, 100.0, random_seed=3))
        for node in tree.nodes():
            assert node.children is None or len(node.children) == 4
            if node.children is not None:
                assert node.bodies == []

    def test_insert_outside_region_is_noop(self):
        """Bodies outside the node's region are ignored."""
        node = QuadTreeNode(Region(0.0, 0.0, 100.0))
        assert not node.insert(Body(150.0, 50.0))
        assert node.is_empty()
        assert node.total_mass == 0.0

    def test_insert_non_finite_position_is_noop(self):
        """NaN positions never enter the tree."""
        node = QuadTreeNode(Region(0.0, 0.0, 100.0))
        assert not node.insert(Body(float("nan"), 50.0))
        assert node.is_empty()

    def test_child_of_external_node_raises(self):
        """Asking an external node for a child raises ValueError."""
        node = QuadTreeNode(Region(0.0, 0.0, 100.0))
        with pytest.raises(ValueError):
            node.child(Quadrant.NW)


# =============================================================================
# Insertion tests
# =============================================================================


class TestQuadTreeInsertion:
    """Tests for QuadTree insertion operations."""

    def test_empty_tree(self):
        """Test empty tree state."""
        tree = QuadTree(Region(0.0, 0.0, 100.0))
        assert tree.body_count == 0
        assert tree.dropped_count == 0
        assert tree.root.is_empty()
        assert tree.depth() == 0

    def test_multiple_body_insertion(self):
        """Test inserting multiple bodies."""
        positions = [(25, 25), (75, 25), (25, 75), (75, 75), (50, 50)]
        tree = build_tree([Body(float(x), float(y)) for x, y in positions])
        assert tree.body_count == 5
        assert tree.dropped_count == 0

    def test_out_of_domain_counted(self):
        """Bodies outside the root region are dropped and counted."""
        tree = build_tree([Body(10.0, 10.0), Body(-5.0, 10.0), Body(10.0, 101.0)])
        assert tree.body_count == 1
        assert tree.dropped_count == 2
        assert tree.total_mass == 1.0

    def test_boundary_bodies_are_inserted(self):
        """Bodies on the domain edges are inside (closed containment)."""
        corners = [Body(0.0, 0.0), Body(100.0, 0.0), Body(0.0, 100.0), Body(100.0, 100.0)]
        tree = build_tree(corners)
        assert tree.body_count == 4
        assert tree.root.child(Quadrant.NW).body is corners[0]
        assert tree.root.child(Quadrant.NE).body is corners[1]
        assert tree.root.child(Quadrant.SW).body is corners[2]
        assert tree.root.child(Quadrant.SE).body is corners[3]

    def test_midline_tie_break(self):
        """Points on shared edges land east/south deterministically."""
        center = Body(50.0, 50.0)
        other = Body(10.0, 10.0)
        tree = build_tree([other, center])
        assert tree.root.child(Quadrant.SE).body is center

    def test_every_body_in_exactly_one_leaf(self):
        """Each inserted body appears in exactly one external node."""
        bodies = random_bodies(80, 100.0, random_seed=11)
        tree = build_tree(bodies)
        seen = leaf_bodies(tree)
        assert len(seen) == len(bodies)
        assert {id(b) for b in seen} == {id(b) for b in bodies}

    def test_leaf_contains_its_body(self):
        """Every leaf body lies in its leaf's region."""
        tree = build_tree(random_bodies(80, 100.0, random_seed=12))
        for node in tree.nodes():
            for body in node.bodies:
                assert node.region.contains(body.x, body.y)

    def test_depth_cutoff_merges_colocated_bodies(self):
        """Coincident bodies stop subdividing at max_depth and share one leaf."""
        bodies = [Body(10.0, 10.0) for _ in range(3)]
        tree = build_tree(bodies, max_depth=5)

        assert tree.body_count == 3
        assert tree.depth() == 5
        leaves = [node for node in tree.nodes() if len(node.bodies) > 1]
        assert len(leaves) == 1
        assert leaves[0].depth == 5
        assert len(leaves[0].bodies) == 3
        assert leaves[0].total_mass == 3.0

    def test_many_coincident_bodies_terminate(self):
        """Hundreds of bodies at one point do not recurse without bound."""
        bodies = [Body(33.3, 66.6) for _ in range(300)]
        tree = build_tree(bodies)
        assert tree.body_count == 300
        assert tree.depth() <= tree.max_depth

    def test_excessive_max_depth_rejected(self):
        """A depth cutoff beyond the supported maximum is refused up front."""
        with pytest.raises(InvalidParameterError, match="max_depth"):
            QuadTree(Region(0.0, 0.0, 100.0), max_depth=5000)


# =============================================================================
# Awkward geometry tests
# =============================================================================


AWKWARD_EXTENT = 844.577429673523


def assert_fully_placed(tree, bodies):
    """Every body sits in exactly one leaf and the root holds all their mass."""
    assert tree.body_count == len(bodies)
    assert tree.dropped_count == 0
    seen = leaf_bodies(tree)
    assert len(seen) == len(bodies)
    assert {id(b) for b in seen} == {id(b) for b in bodies}
    leaf_mass = sum(node.total_mass for node in tree.nodes() if node.is_external())
    assert leaf_mass == pytest.approx(tree.total_mass)
    assert tree.total_mass == pytest.approx(sum(b.mass for b in bodies))


class TestQuadTreeAwkwardGeometry:
    """Extents and origins whose child bounds are not exactly representable."""

    def test_far_corner_of_non_dyadic_extent(self):
        """Bodies at and just inside the far corner all reach a leaf."""
        e = AWKWARD_EXTENT
        bodies = [
            Body(e, e),
            Body(e - 1e-6, e - 1e-6),
            Body(e, e - 1e-6),
            Body(1.0, 1.0),
        ]
        tree = build_tree(bodies, extent=e)
        assert_fully_placed(tree, bodies)

    def test_offset_origin_region(self):
        """A region with a fractional origin keeps its corner bodies."""
        region = Region(0.1, 0.1, 0.3)
        far = region.x + region.length
        bodies = [
            Body(far, far),
            Body(far - 1e-12, far - 1e-12),
            Body(region.x, far),
            Body(far, region.y),
            Body(0.25, 0.25),
        ]
        tree = QuadTree(region, softening=0.01)
        for body in bodies:
            assert tree.insert(body)
        assert_fully_placed(tree, bodies)

    @pytest.mark.parametrize("seed", [3, 17, 29, 101])
    def test_wall_bodies_match_direct_sum(self, seed):
        """Random extents with bodies on walls and corners: exact traversal equals direct sum."""
        rng = random.Random(seed)
        e = rng.uniform(1.0, 1000.0)
        bodies = [Body(0.0, 0.0), Body(e, 0.0), Body(0.0, e), Body(e, e)]
        for _ in range(6):
            t = rng.uniform(0.0, e)
            bodies.extend([Body(e, t), Body(t, e), Body(0.0, t), Body(t, 0.0)])
        for _ in range(20):
            bodies.append(Body(rng.uniform(0.0, e), rng.uniform(0.0, e)))

        tree = build_tree(bodies, extent=e, theta=0.0)
        assert_fully_placed(tree, bodies)

        approx = tree_forces(tree, bodies)
        exact = direct_forces(bodies, gravity=1.0, softening=3.0)
        np.testing.assert_allclose(approx, exact, rtol=1e-9, atol=1e-12)

    def test_corner_body_ignores_own_cell_at_large_theta(self):
        """A far-corner body sees only its partner, whatever theta allows."""
        e = AWKWARD_EXTENT
        corner = Body(e, e, mass=1.0)
        heavy = Body(1.0, 1.0, mass=100.0)
        tree = build_tree([corner, heavy], extent=e, theta=50.0)

        stats = ForceStats()
        corner.reset_force()
        tree.update_force(corner, stats)

        expected = direct_forces([corner, heavy])[0]
        assert (corner.fx, corner.fy) == pytest.approx(tuple(expected))
        assert stats.exact == 1


# =============================================================================
# Mass distribution tests
# =============================================================================


class TestQuadTreeMassDistribution:
    """Tests for incremental mass and center-of-mass aggregation."""

    def test_two_equal_bodies_mass(self):
        """Test center of mass with two equal-mass bodies."""
        tree = build_tree([Body(20.0, 50.0), Body(80.0, 50.0)])

        assert tree.root.total_mass == 2.0
        assert abs(tree.root.center_of_mass_x - 50.0) < 1e-10
        assert abs(tree.root.center_of_mass_y - 50.0) < 1e-10

    def test_weighted_center_of_mass(self):
        """Test center of mass with different masses."""
        tree = build_tree([Body(0.0, 0.0, mass=3.0), Body(100.0, 0.0, mass=1.0)])

        # COM = (3*0 + 1*100) / 4 = 25
        assert tree.total_mass == 4.0
        assert abs(tree.root.center_of_mass_x - 25.0) < 1e-10

    def test_mass_conservation(self):
        """Root mass equals the sum of all body masses."""
        bodies = random_bodies(200, 100.0, random_seed=5)
        tree = build_tree(bodies)
        assert tree.total_mass == pytest.approx(sum(b.mass for b in bodies))

    def test_centroid_matches_independent_computation(self):
        """Root center of mass equals the mass-weighted centroid."""
        bodies = random_bodies(150, 100.0, random_seed=6)
        tree = build_tree(bodies)

        m = sum(b.mass for b in bodies)
        cx = sum(b.x * b.mass for b in bodies) / m
        cy = sum(b.y * b.mass for b in bodies) / m
        assert tree.center_of_mass == pytest.approx((cx, cy))

    def test_every_node_aggregate_matches_subtree(self):
        """Each node's aggregates match the bodies stored below it."""
        tree = build_tree(random_bodies(100, 100.0, random_seed=8))
        for node in tree.nodes():
            below = [b for sub in node.walk() for b in sub.bodies]
            if not below:
                assert node.total_mass == 0.0
                continue
            m = sum(b.mass for b in below)
            assert node.total_mass == pytest.approx(m)
            assert node.center_of_mass_x == pytest.approx(sum(b.x * b.mass for b in below) / m)
            assert node.center_of_mass_y == pytest.approx(sum(b.y * b.mass for b in below) / m)

    def test_insertion_order_does_not_change_aggregates(self):
        """Two insertion orders give the same aggregates at every node."""
        bodies = random_bodies(120, 100.0, random_seed=9)
        shuffled = list(bodies)
        random.Random(1).shuffle(shuffled)

        first = aggregates_by_region(build_tree(bodies))
        second = aggregates_by_region(build_tree(shuffled))

        assert first.keys() == second.keys()
        for region, values in first.items():
            assert second[region] == pytest.approx(values, rel=1e-9)


# =============================================================================
# Force tests
# =============================================================================


class TestQuadTreeForceCalculation:
    """Tests for Barnes-Hut force approximation."""

    def test_force_on_single_body(self):
        """A body alone in the tree feels no force from itself."""
        body = Body(50.0, 50.0)
        tree = build_tree([body])
        tree.update_force(body)
        assert body.fx == 0.0
        assert body.fy == 0.0

    def test_attractive_force_direction(self):
        """Gravity pulls bodies toward each other."""
        left = Body(40.0, 50.0)
        right = Body(60.0, 50.0)
        tree = build_tree([left, right])
        tree_forces(tree, [left, right])

        assert left.fx > 0
        assert right.fx < 0
        assert left.fy == 0.0
        assert right.fy == 0.0

    def test_empty_tree_contributes_nothing(self):
        """Force from an empty tree is zero."""
        tree = QuadTree(Region(0.0, 0.0, 100.0))
        body = Body(10.0, 10.0)
        stats = ForceStats()
        tree.update_force(body, stats)
        assert (body.fx, body.fy) == (0.0, 0.0)
        assert stats == ForceStats()

    def test_self_force_excluded_with_large_theta(self):
        """Clusters containing the body are opened even for huge theta."""
        bodies = random_bodies(40, 100.0, random_seed=21)
        tree = build_tree(bodies, theta=50.0)
        for body in bodies:
            body.reset_force()
            stats = ForceStats()
            tree.update_force(body, stats)
            # The body's own leaf is reached, so at least the root was opened
            assert stats.expansions >= 1

    def test_body_never_attracted_by_own_aggregate(self):
        """A heavy far corner would let the root pass the criterion; it must still open."""
        light = Body(1.0, 1.0, mass=1.0)
        heavy = Body(99.0, 99.0, mass=100.0)
        # side / distance-to-COM is about 0.72 < 1.0 for the light body
        tree = build_tree([light, heavy], theta=1.0)

        stats = ForceStats()
        light.reset_force()
        tree.update_force(light, stats)

        expected = direct_forces([light, heavy])[0]
        assert (light.fx, light.fy) == pytest.approx(tuple(expected))
        assert stats.approximations == 0

    def test_theta_zero_matches_direct_sum(self):
        """With theta = 0 the tree force equals brute-force summation."""
        bodies = random_bodies(60, 100.0, random_seed=31)
        tree = build_tree(bodies, theta=0.0)
        approx = tree_forces(tree, bodies)
        exact = direct_forces(bodies, gravity=1.0, softening=3.0)
        np.testing.assert_allclose(approx, exact, rtol=1e-9, atol=1e-12)

    def test_theta_zero_never_approximates(self):
        """With theta = 0 no pseudo-body is used."""
        bodies = random_bodies(50, 100.0, random_seed=32)
        tree = build_tree(bodies, theta=0.0)
        stats = ForceStats()
        tree_forces(tree, bodies, stats)
        assert stats.approximations == 0
        assert stats.exact == len(bodies) * (len(bodies) - 1)

    def test_default_theta_close_to_direct_sum(self):
        """Barnes-Hut at theta = 0.5 stays close to the exact forces."""
        bodies = random_bodies(200, 800.0, random_seed=33)
        tree = build_tree(bodies, extent=800.0, theta=0.5)
        approx = tree_forces(tree, bodies)
        exact = direct_forces(bodies)
        error = np.linalg.norm(approx - exact) / np.linalg.norm(exact)
        assert error < 0.05

    def test_expansions_monotone_in_theta(self):
        """Smaller theta never opens fewer nodes for the same body."""
        bodies = random_bodies(150, 100.0, random_seed=41)
        thetas = [2.0, 1.0, 0.8, 0.5, 0.3, 0.1, 0.0]
        trees = [build_tree(bodies, theta=t) for t in thetas]

        for body in bodies[:30]:
            counts = []
            for tree in trees:
                stats = ForceStats()
                body.reset_force()
                tree.update_force(body, stats)
                counts.append(stats.expansions)
            assert counts == sorted(counts)

    def test_coincident_bodies_contribute_nothing(self):
        """Zero-distance pairs are skipped instead of producing NaN."""
        a = Body(20.0, 20.0)
        b = Body(20.0, 20.0)
        c = Body(80.0, 20.0)
        tree = build_tree([a, b, c], max_depth=4)
        tree_forces(tree, [a, b, c])

        for body in (a, b, c):
            assert np.isfinite(body.fx) and np.isfinite(body.fy)
        # Only c pulls on a; b sits exactly on top of it
        expected = direct_forces([a, c])[0]
        assert (a.fx, a.fy) == pytest.approx(tuple(expected))

    def test_forces_sum_to_zero_when_exact(self):
        """Exact pairwise forces obey Newton's third law in total."""
        bodies = random_bodies(30, 100.0, random_seed=51)
        tree = build_tree(bodies, theta=0.0)
        forces = tree_forces(tree, bodies)
        scale = np.abs(forces).max()
        assert np.abs(forces.sum(axis=0)).max() < 1e-9 * scale


class TestQuadTreeFromBodies:
    """Tests for building a QuadTree from a config."""

    def test_from_bodies_uses_config(self):
        """Tree parameters are taken from the config."""
        config = SimulationConfig(extent=200.0, theta=0.7, softening=1.0, gravity=2.0, max_depth=10)
        tree = QuadTree.from_bodies([Body(10.0, 10.0), Body(150.0, 150.0)], config)

        assert tree.root.region == Region(0.0, 0.0, 200.0)
        assert tree.theta == 0.7
        assert tree.softening == 1.0
        assert tree.gravity == 2.0
        assert tree.max_depth == 10
        assert tree.body_count == 2

    def test_from_bodies_empty(self):
        """Building from no bodies yields an empty tree."""
        tree = QuadTree.from_bodies([], SimulationConfig())
        assert tree.body_count == 0
        assert tree.root.is_empty()
