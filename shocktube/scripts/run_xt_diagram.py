"""
Run the air/helium shock tube and save its x-t diagram.

A 3 m helium driver at 400 kPa sits next to 6 m of air at one atmosphere,
both at 300 K, between two closed ends.

Run from the repository root:
    python shocktube/scripts/run_xt_diagram.py --integrator SSP --cfl 0.8 -v
"""

import argparse
import logging
import sys
from pathlib import Path

# Add the repository root to the path so the package imports without installing
project_root = Path(__file__).parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from shocktube import GasSlab, ShockTubeSolver, SolverConfig, available_integrators

logger = logging.getLogger("shocktube")

DEFAULT_SLABS = [
    GasSlab('air', gamma=1.4, molecular_weight=28.97,
            pressure=101325.0, temperature=300.0, length=6.0),
    GasSlab('helium', gamma=1.667, molecular_weight=4.003,
            pressure=400000.0, temperature=300.0, length=3.0),
]


def configure_logging(args):
    if args.very_verbose:
        level, stream = logging.DEBUG, sys.stdout
    elif args.verbose:
        level, stream = logging.INFO, sys.stdout
    else:
        level, stream = logging.WARNING, sys.stderr

    ch = logging.StreamHandler(stream=stream)
    ch.setLevel(level)
    ch.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    logger.setLevel(level)
    logger.addHandler(ch)


def main(args):
    configure_logging(args)

    config = SolverConfig(nx=args.cells, cfl=args.cfl, final_time=args.final_time,
                          snapshot_interval=args.snapshot_interval,
                          interface_method=args.interface, integrator=args.integrator)
    solver = ShockTubeSolver(config)
    solver.initialize(DEFAULT_SLABS)

    def report(fraction):
        print(f"\r  progress: {100 * fraction:5.1f} %", end='', flush=True)

    results = solver.run(progress_callback=report)
    print()

    print(f"Reached t = {results.time * 1000:.3f} ms in {results.time_steps} steps, "
          f"{len(results.snapshots)} snapshots")
    for i, tracer in enumerate(results.tracers):
        print(f"  interface {i}: x = {tracer.trajectory[0][1]:.3f} m -> {tracer.position:.3f} m")
    if results.fallback_count:
        print(f"  volume fraction fallbacks: {results.fallback_count}")

    out = Path(args.output)
    solver.plot_xt_diagram(args.variable, filename=str(out.with_suffix('.png')),
                           log_scale=args.log_scale, show=not args.no_display)
    solver.plot_solution(filename=str(out.with_name(out.stem + '_final.png')),
                         show=not args.no_display)


if __name__ == "__main__":
    integrators = ', '.join(f"{e['name']} (CFL {e['cfl']})" for e in available_integrators())

    parser = argparse.ArgumentParser("Run the air/helium shock tube and plot an x-t diagram.")
    parser.add_argument("-n", "--cells", type=int, default=500, help="number of grid cells")
    parser.add_argument("--cfl", type=float, default=0.4, help="CFL number")
    parser.add_argument("--final-time", type=float, default=0.02, help="end time [s]")
    parser.add_argument("--snapshot-interval", type=float, default=1e-4,
                        help="physical time between snapshots [s]")
    parser.add_argument("--integrator", default="RK2", help=f"time integrator: {integrators}")
    parser.add_argument("--interface", default="sharp", choices=["sharp", "ghost", "mixed"],
                        help="interface tracking method")
    parser.add_argument("--variable", default="p",
                        choices=["p", "rho", "u", "T", "gamma", "molecular_weight"],
                        help="field shown in the x-t diagram")
    parser.add_argument("--log-scale", action="store_true", help="colour by log10 of the field")
    parser.add_argument("-o", "--output", default="shock_tube_xt", help="output file stem")
    parser.add_argument("--no-display", action="store_true", help="do not open plot windows")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable verbose output")
    parser.add_argument("-vv", "--very-verbose", action="store_true", help="enable very verbose output")

    args = parser.parse_args()

    main(args)
