"""
Export functionality for simulation snapshots.

Example usage:
    from barnes_hut import Simulation, SimulationConfig
    from barnes_hut.export import to_svg

    sim = Simulation(SimulationConfig(body_count=100, random_seed=7)).run(50)

    with open("snapshot.svg", "w") as f:
        f.write(to_svg(sim, show_tree=True))
"""

from .svg import body_radius, to_svg

__all__ = ["body_radius", "to_svg"]
