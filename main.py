"""
Pyramid Merge Solver - Entry Point

Command-line front end for the pyramid merge puzzle: show a layout, play
in the terminal, run a solver, or replay a saved game.

Example:
    python main.py show --seed 1234567
    python main.py play --seed 1234567
    python main.py solve --seed 1234567 --strategy dfs --iterations 5000
    python main.py solve --seed 1234567 --threaded --save solution.json
    python main.py replay solution.json
    python main.py settings --strategy greedy --iterations 5000
"""

import sys
import json
import logging
import argparse
from pathlib import Path
from typing import Optional

from src.engine import GameEngine, GameStatus, Snapshot, parse_seed
from src.solver import (
    SolutionContext,
    SolutionPlayback,
    SolverStrategy,
    create_strategy,
    get_strategy_info,
    get_strategy_names,
    resolve_strategy_name,
)
from src.settings import load_settings, save_settings


logger = logging.getLogger(__name__)


def configure_logging(debug: bool) -> None:
    """Log to both console and file."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        handlers=[
            logging.StreamHandler(),  # Console output
            logging.FileHandler("solver.log", mode='w', encoding='utf-8')  # File output
        ]
    )


def seed_argument(text: str) -> int:
    """argparse type: reject anything that is not a 7-digit seed."""
    seed = parse_seed(text)
    if seed is None:
        raise argparse.ArgumentTypeError("Seed must be a 7-digit number")
    return seed


def strategy_options(name: str, settings) -> dict:
    """Constructor options saved for a strategy in config.json."""
    return dict(settings.get("strategy_options", {}).get(name, {}))


def build_strategy(name: Optional[str], settings) -> SolverStrategy:
    name = resolve_strategy_name(name)
    return create_strategy(name, **strategy_options(name, settings))


def print_board(engine: GameEngine) -> None:
    """Print each layer, top first, as value/color per cell ('.' when merged away)."""
    config = engine.config
    for y in reversed(range(config.layers)):
        print(f"Layer {y}:")
        side = config.layer_side(y)
        for x in range(side):
            cells = []
            for z in range(side - x):
                block = engine.block_at(x, y, z)
                if block is None or block.disabled:
                    cells.append("   .   ")
                else:
                    mark = "*" if engine.is_free(block.id) else " "
                    cells.append(f"{block.id:2d}:{block.value:3d}{'abcd'[block.color % 4]}{mark}")
            print("  " + " ".join(cells))
    print(f"Seed {engine.seed}  Score {engine.score}  Status {engine.status.name}")


def cmd_show(args, settings) -> int:
    engine = GameEngine(seed=args.seed)
    print_board(engine)
    return 0


def cmd_play(args, settings) -> int:
    """Minimal terminal loop: merge <a> <b> | undo | moves | hint | reset [seed] | quit."""
    engine = GameEngine(seed=args.seed)
    strategy = build_strategy(settings.get("strategy_name"), settings)
    print_board(engine)

    while True:
        try:
            line = input("> ").strip()
        except EOFError:
            return 0
        parts = line.split()
        if not parts:
            continue
        command = parts[0].lower()

        if command in ("quit", "exit"):
            return 0
        if command == "merge" and len(parts) == 3 and all(p.isdigit() for p in parts[1:]):
            if not engine.merge(int(parts[1]), int(parts[2])):
                print("Illegal merge")
        elif command == "undo":
            if not engine.undo():
                print("Nothing to undo")
        elif command == "moves":
            for move in strategy.find_all_valid_moves(engine):
                print(f"  {move}")
            continue
        elif command == "hint":
            context = SolutionContext(engine=engine, restore_on_success=True,
                                      max_iterations=settings.get("max_iterations", 2000))
            solution = strategy.solve(context)
            if solution.has_moves:
                print(f"Try {solution.get_move(0)}")
            else:
                print(f"No hint: {solution.outcome}")
            continue
        elif command == "reset":
            seed = None
            if len(parts) > 1:
                seed = parse_seed(parts[1])
                if seed is None:
                    print("Seed must be a 7-digit number")
                    continue
            engine.reset(seed)
        else:
            print("Commands: merge <source> <target>, undo, moves, hint, reset [seed], quit")
            continue

        print_board(engine)
        if engine.status == GameStatus.WON:
            print("You won!")
        elif engine.has_lost:
            print("No merges left: undo or reset")


def cmd_solve(args, settings) -> int:
    strategy_name = resolve_strategy_name(args.strategy or settings.get("strategy_name"))
    iterations = args.iterations or settings.get("max_iterations", 2000)
    engine = GameEngine(seed=args.seed)
    logger.info(f"Solving seed {engine.seed} with {strategy_name}, budget {iterations}")

    if args.threaded:
        solution = run_threaded(engine.export_snapshot(), strategy_name, iterations,
                                strategy_options(strategy_name, settings))
        if solution is None:
            return 1
    else:
        strategy = build_strategy(strategy_name, settings)
        context = SolutionContext(engine=engine, max_iterations=iterations,
                                  restore_on_success=True)
        solution = strategy.solve(context)

    print(f"Seed {engine.seed}: {solution.outcome} "
          f"({solution.metrics.iterations} iterations, "
          f"{solution.metrics.computation_time_ms:.0f}ms)")

    if not solution.solved:
        return 1

    playback = SolutionPlayback(solution=solution, engine=engine)
    for i, move in enumerate(solution.moves, start=1):
        print(f"  {i:2d}. {move}")
    playback.play_all()
    print(f"Replayed: {engine.status.name}, score {engine.score}")

    if args.save:
        save_snapshot(engine.export_snapshot(), Path(args.save))
    return 0


def run_threaded(snapshot: Snapshot, strategy_name: str, iterations: int,
                 options: Optional[dict] = None):
    """Run the solver on a SolverWorker thread and wait for its result."""
    from PyQt5.QtCore import QCoreApplication
    from src.solver_worker import SolverWorker

    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    worker = SolverWorker(snapshot, strategy_name=strategy_name, max_iterations=iterations,
                          **(options or {}))
    worker.progress_changed.connect(lambda p, m: logger.info(f"{p * 100:.0f}% {m}"))
    worker.error_occurred.connect(lambda e: logger.error(f"Solver failed: {e}"))
    worker.finished.connect(app.quit)
    worker.start()
    try:
        app.exec_()
    except KeyboardInterrupt:
        if worker.is_running():
            worker.request_stop()
    worker.wait()
    return worker.solution


def save_snapshot(snapshot: Snapshot, path: Path) -> None:
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(snapshot.to_dict(), f, indent=2)
    logger.info(f"Game saved: {path}")


def cmd_replay(args, settings) -> int:
    try:
        with open(args.file, 'r', encoding='utf-8') as f:
            snapshot = Snapshot.from_dict(json.load(f))
    except (IOError, ValueError, KeyError, TypeError) as e:
        logger.error(f"Failed to load {args.file}: {e}")
        return 1

    engine = GameEngine(seed=snapshot.seed)
    engine.import_snapshot(snapshot, replay=True)
    print_board(engine)
    return 0 if engine.status == GameStatus.WON else 1


def cmd_strategies(args, settings) -> int:
    for info in get_strategy_info():
        print(f"{info['name']:8s} {info['description']}")
        saved = strategy_options(info["name"], settings)
        for option, default in info["options"].items():
            value = saved.get(option, default)
            print(f"         {option} = {value!r}")
    return 0


def cmd_settings(args, settings) -> int:
    """Print the effective settings, saving any values given on the command line."""
    changes = {}
    if args.strategy is not None:
        changes["strategy_name"] = args.strategy
    if args.iterations is not None:
        changes["max_iterations"] = args.iterations
    if args.debug_enabled is not None:
        changes["debug_enabled"] = args.debug_enabled

    if changes:
        settings.update(changes)
        save_settings(settings)

    for key, value in settings.items():
        print(f"{key:18s} {json.dumps(value)}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pyramid Merge Solver")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    show = subparsers.add_parser("show", help="Print a starting layout")
    show.add_argument("--seed", type=seed_argument, help="7-digit seed")
    show.set_defaults(handler=cmd_show)

    play = subparsers.add_parser("play", help="Play in the terminal")
    play.add_argument("--seed", type=seed_argument, help="7-digit seed")
    play.set_defaults(handler=cmd_play)

    solve = subparsers.add_parser("solve", help="Search for a winning sequence")
    solve.add_argument("--seed", type=seed_argument, help="7-digit seed")
    solve.add_argument("--strategy", choices=get_strategy_names(), help="Solving strategy")
    solve.add_argument("--iterations", type=int, help="Search budget")
    solve.add_argument("--threaded", action="store_true", help="Run on a worker thread")
    solve.add_argument("--save", help="Write the winning game to a JSON file")
    solve.set_defaults(handler=cmd_solve)

    replay = subparsers.add_parser("replay", help="Replay a saved game")
    replay.add_argument("file", help="JSON file written by solve --save")
    replay.set_defaults(handler=cmd_replay)

    strategies = subparsers.add_parser("strategies", help="List solving strategies")
    strategies.set_defaults(handler=cmd_strategies)

    config = subparsers.add_parser("settings", help="Show or change saved settings")
    config.add_argument("--strategy", choices=get_strategy_names(), help="Default strategy")
    config.add_argument("--iterations", type=int, help="Default search budget")
    config.add_argument("--debug-enabled", dest="debug_enabled", default=None,
                        action=argparse.BooleanOptionalAction, help="Debug logging")
    config.set_defaults(handler=cmd_settings)

    return parser


def main(argv: Optional[list] = None) -> int:
    """Entry point."""
    args = build_parser().parse_args(argv)
    settings = load_settings()
    configure_logging(args.debug or settings.get("debug_enabled", False))
    return args.handler(args, settings)


if __name__ == "__main__":
    sys.exit(main())
