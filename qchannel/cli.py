"""Command line front end for the queue-decoherence channel model.

::

    qchannel capacity --kappa 0.5 --lambda 0.3
    qchannel simulate "HELLO" --lambda 0.3 --kappa 0.5 --seed 42
"""

import argparse
import logging
import sys

from qchannel.capacity import (
    capacity_curve,
    capacity_deterministic_service,
    capacity_random_service,
)
from qchannel.config import CURVE_LAMBDA_MAX, CURVE_LAMBDA_MIN
from qchannel.errors import ChannelError
from qchannel.queueing import MODES
from qchannel.simulation import ChannelSimulation

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qchannel",
        description="Capacity of a queue channel with delay-induced bit flips",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    cap = sub.add_parser("capacity", help="closed-form capacity curves")
    cap.add_argument("--kappa", type=float, required=True)
    cap.add_argument("--lambda", dest="lmbda", type=float, default=None,
                     help="also print the capacity at this arrival rate")
    cap.add_argument("--lambda-min", type=float, default=CURVE_LAMBDA_MIN)
    cap.add_argument("--lambda-max", type=float, default=CURVE_LAMBDA_MAX)
    cap.add_argument("--step", type=float, default=0.1)

    sim = sub.add_parser("simulate", help="send a message through the channel")
    sim.add_argument("message")
    sim.add_argument("--lambda", dest="lmbda", type=float, required=True)
    sim.add_argument("--kappa", type=float, required=True)
    sim.add_argument("--seed", type=int, default=None)
    sim.add_argument("--mode", choices=MODES, default="steady_state")
    return parser


def _print_capacity(args: argparse.Namespace) -> None:
    if args.lmbda is not None:
        print(f"M/M/1 capacity at λ={args.lmbda:.2f}: "
              f"{capacity_random_service(args.lmbda, args.kappa):.3f}")
        print(f"M/D/1 capacity at λ={args.lmbda:.2f}: "
              f"{capacity_deterministic_service(args.lmbda, args.kappa):.3f}")

    curve = capacity_curve(
        args.kappa, args.step, lambda_min=args.lambda_min, lambda_max=args.lambda_max
    )
    print(f"Capacity curve for κ={curve.kappa:.2f}")
    print(f"{'λ':>6} {'M/M/1':>8} {'M/D/1':>8}")
    for point in curve:
        print(f"{point.arrival_rate:>6.2f} {point.random_service:>8.3f} "
              f"{point.deterministic_service:>8.3f}")


def main(argv=None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "capacity":
            _print_capacity(args)
        else:
            sim = ChannelSimulation(args.lmbda, args.kappa, mode=args.mode)
            ChannelSimulation.print_report(sim.run(args.message, rng=args.seed))
    except ChannelError as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"qchannel: error: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
