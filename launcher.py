import logging
import math
import time
from argparse import ArgumentParser, Namespace
from dataclasses import replace
from signal import signal, SIGINT
from threading import Event

import numpy as np

from modules.Settings import Settings
from modules.fluid import DensitySeed, FieldName, FluidFlow, PointerInput, TickCancelled


def orbit(tick: int, fps: float, radius: float, speed: float) -> tuple[float, float]:
    """Normalised window position of the scripted pointer at a tick."""
    seconds: float = tick / (fps if fps > 0.0 else 60.0)
    angle: float = 2.0 * math.pi * speed * seconds
    return 0.5 + radius * math.cos(angle), 0.5 + radius * math.sin(angle)


def run(settings: Settings, shutdown: Event) -> FluidFlow:
    driver = settings.driver
    size: int = settings.fluid.grid_size

    seed: DensitySeed | None = None
    if driver.seed:
        center: float = (size - 1) * 0.5
        seed = DensitySeed(center=(center, center), radius=driver.seed_radius)

    flow = FluidFlow(settings.fluid, seed=seed)
    pointer = PointerInput(size)
    frame_time: float = 1.0 / driver.fps if driver.fps > 0.0 else 0.0
    log_every: int = settings.fluid.report_interval

    for tick in range(driver.ticks):
        started: float = time.perf_counter()

        x, y = orbit(tick, driver.fps, driver.orbit_radius, driver.orbit_speed)
        if tick == 0:
            pointer.press(x, y)
        else:
            pointer.move(x, y)

        try:
            stats = flow.update(flow.make_params(pointer.consume()), cancel=shutdown)
        except TickCancelled:
            logging.info(f"Stopped after {flow.tick} ticks")
            break

        if stats.tick % log_every == 0:
            logging.info(f"tick {stats.tick}: divergence in={stats.divergence:.3e} "
                         f"out={flow.residual_divergence():.3e} "
                         f"density={float(np.sum(flow.density)):.2f}")

        remaining: float = frame_time - (time.perf_counter() - started)
        if remaining > 0.0 and shutdown.wait(remaining):
            logging.info(f"Stopped after {flow.tick} ticks")
            break

    pointer.release()
    return flow


def main() -> None:
    parser: ArgumentParser = ArgumentParser(description="Headless grid fluid solver")
    parser.add_argument('-s',   '--settings',   type=str,   default=None,   help='settings json file')
    parser.add_argument('-n',   '--size',       type=int,   default=None,   help='grid cells per side')
    parser.add_argument('-t',   '--ticks',      type=int,   default=None,   help='number of ticks')
    parser.add_argument('-fps', '--fps',        type=float, default=None,   help='ticks per second, 0 = unpaced')
    parser.add_argument('-i',   '--iterations', type=int,   default=None,   help='jacobi iterations')
    parser.add_argument('-o',   '--output',     type=str,   default=None,   help='write final fields to .npz')
    parser.add_argument('--save-settings',      type=str,   default=None,   help='write effective settings json')
    parser.add_argument('-v',   '--verbose',    action='store_true',        help='debug logging')
    args: Namespace = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s")

    settings: Settings = Settings.load(args.settings) if args.settings else Settings()
    if args.settings:
        logging.info(f"Loaded settings from: {args.settings}")

    if args.size is not None:
        settings.fluid = replace(settings.fluid, grid_size=args.size)
    if args.iterations is not None:
        settings.fluid.jacobi_iterations = args.iterations
    if args.ticks is not None:
        settings.driver.ticks = args.ticks
    if args.fps is not None:
        settings.driver.fps = args.fps
    if args.output is not None:
        settings.driver.output = args.output
    settings.fluid.check_ranges()
    settings.driver.check_ranges()

    if args.save_settings:
        settings.save(args.save_settings)
        logging.info(f"Saved settings to: {args.save_settings}")

    shutdown_event = Event()

    def signal_handler_exit(sig, frame) -> None:
        logging.info("Received interrupt signal, shutting down...")
        shutdown_event.set()

    signal(SIGINT, signal_handler_exit)

    flow: FluidFlow = run(settings, shutdown_event)

    if settings.driver.output:
        fields = flow.snapshot()
        np.savez(settings.driver.output,
                 density=fields[FieldName.DENSITY],
                 velocity=fields[FieldName.VELOCITY])
        logging.info(f"Wrote fields to: {settings.driver.output}")


if __name__ == '__main__':
    main()
