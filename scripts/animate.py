#!/usr/bin/env python3
"""
Animate a Barnes-Hut simulation with matplotlib.

Clicking inside the axes injects a resting body at the pointer; it joins
the simulation at the next tick.

Usage:
    uv run python scripts/animate.py [--bodies N] [--theta T] [--save FILE]

Examples:
    uv run python scripts/animate.py
    uv run python scripts/animate.py --bodies 1000 --theta 0.8
    uv run python scripts/animate.py --frames 300 --save build/run.gif
"""

from __future__ import annotations

import argparse
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.animation import FuncAnimation

from barnes_hut import Simulation, SimulationConfig
from barnes_hut.export import body_radius


def main():
    parser = argparse.ArgumentParser(description="Animate a Barnes-Hut simulation")
    parser.add_argument("--bodies", type=int, default=500, help="Number of random bodies")
    parser.add_argument("--theta", type=float, default=0.5, help="Opening angle")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--frames", type=int, default=600, help="Frames to render")
    parser.add_argument("--interval", type=int, default=16, help="Milliseconds per frame")
    parser.add_argument("--save", help="Save the animation to this file instead of showing it")

    args = parser.parse_args()

    config = SimulationConfig(body_count=args.bodies, theta=args.theta, random_seed=args.seed)
    sim = Simulation(config)

    fig, ax = plt.subplots(figsize=(8, 8))
    fig.patch.set_facecolor("black")
    ax.set_facecolor("black")
    ax.set_xlim(0, config.extent)
    # Screen coordinates: y grows downward
    ax.set_ylim(config.extent, 0)
    ax.set_aspect("equal")
    ax.axis("off")

    def sizes():
        return [(2 * body_radius(v.mass)) ** 2 for v in sim.snapshot()]

    def offsets():
        return np.array([(v.x, v.y) for v in sim.snapshot()], dtype=float).reshape(-1, 2)

    scatter = ax.scatter([], [], c="white", linewidths=0)
    scatter.set_offsets(offsets())
    scatter.set_sizes(sizes())
    title = ax.set_title("", color="white")

    def on_click(event):
        if event.inaxes is not ax or event.xdata is None:
            return
        sim.add_body(event.xdata, event.ydata)

    fig.canvas.mpl_connect("button_press_event", on_click)

    def update(_frame):
        sim.tick()
        scatter.set_offsets(offsets())
        scatter.set_sizes(sizes())
        title.set_text(f"t = {sim.time:.1f}   bodies = {len(sim.bodies)}")
        return scatter, title

    animation = FuncAnimation(fig, update, frames=args.frames, interval=args.interval, blit=False)

    if args.save:
        Path(args.save).parent.mkdir(parents=True, exist_ok=True)
        animation.save(args.save)
        print(f"Animation saved to {args.save}")
    else:
        plt.show()


if __name__ == "__main__":
    main()
