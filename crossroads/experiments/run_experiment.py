import argparse
import logging
import sys
import time
from typing import List, Optional

from pydantic import ValidationError

from crossroads.domain.config import SimulationSettings
from crossroads.domain.errors import CollisionDetected
from crossroads.domain.models import SimulationResult, StrategyKind
from crossroads.io.logging_utils import logger, setup_logging
from crossroads.io.results_writer import save_result_as_json
from crossroads.kernel.simulation_kernel import SimulationKernel


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crossroads-run",
        description="Headless simulation of a two-lane automatic crossing.",
    )
    parser.add_argument(
        "--controller", choices=[k.value for k in StrategyKind], default=StrategyKind.TRAFFIC_LIGHT.value,
        help="controller strategy",
    )
    parser.add_argument("--min-interarrival", type=float, default=2.0, help="minimum seconds between arrivals")
    parser.add_argument("--max-interarrival", type=float, default=4.0, help="maximum seconds between arrivals")
    parser.add_argument("--window-size", type=int, default=600, help="display window size in pixels")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--duration", type=float, default=120.0, help="simulated seconds")
    parser.add_argument("--output-dir", default="results")
    parser.add_argument("--verbose", action="store_true")
    return parser


def parse_settings(parser: argparse.ArgumentParser, argv: Optional[List[str]] = None):
    args = parser.parse_args(argv)
    try:
        settings = SimulationSettings(
            strategy=StrategyKind(args.controller),
            min_interarrival_s=args.min_interarrival,
            max_interarrival_s=args.max_interarrival,
            window_size=args.window_size,
            seed=args.seed,
        )
    except ValidationError as exc:
        messages = "; ".join(err["msg"] for err in exc.errors())
        parser.error(messages)
    if args.duration <= 0:
        parser.error("duration must be positive")
    return args, settings


def run_headless_experiment(settings: SimulationSettings, duration_s: float) -> SimulationResult:
    kernel = SimulationKernel(settings=settings)
    kernel.initialize()
    max_ticks = int(duration_s * 1000.0 / kernel.config.tick_ms)

    start_time = time.time()
    try:
        kernel.run(max_ticks)
    except CollisionDetected as exc:
        logger.error("Run aborted: %s", exc)
    wall_time = time.time() - start_time

    return SimulationResult(
        strategy=settings.strategy,
        settings=settings.model_dump(mode="json"),
        ticks=kernel.state.tick_id,
        simulated_seconds=kernel.state.time_ms / 1000.0,
        wall_time_seconds=wall_time,
        vehicles_admitted=kernel.lanes.vehicles_created,
        vehicles_retired=kernel.lanes.vehicles_retired,
        arrivals_refused=kernel.state.arrivals_refused,
        finish_reason=kernel.state.finish_reason,
        collision=kernel.state.collision,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args, settings = parse_settings(parser, argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    logger.info("Start of the automatic crossing simulation")
    result = run_headless_experiment(settings, args.duration)

    logger.info("Simulated %.1f s in %.4f s", result.simulated_seconds, result.wall_time_seconds)
    logger.info("Vehicles admitted: %d, retired: %d", result.vehicles_admitted, result.vehicles_retired)
    path = save_result_as_json(result, args.output_dir)
    logger.info("Results saved to %s", path)

    return 1 if result.collision is not None else 0


if __name__ == "__main__":
    sys.exit(main())
