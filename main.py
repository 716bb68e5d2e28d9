"""
Entry point for the falling-block game.

Loads settings from a YAML file, applies command-line overrides, and opens
the pygame window.

Usage:
    python main.py
    python main.py --config config/game.yaml
    python main.py --init-speed 3 --start-lines 5
    python main.py --seed 42 --no-sound
"""

from __future__ import annotations

import argparse
import sys

from tetris_engine.config import DEFAULT_CONFIG_PATH, GameConfig, load_config
from tetris_engine.storage import BestScoreStore


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Namespace with config path and setting overrides (None = not given).
    """
    parser = argparse.ArgumentParser(
        description="Tetris — a falling-block puzzle game.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        type=str,
        default=str(DEFAULT_CONFIG_PATH),
        help="Path to the YAML configuration file.",
    )
    parser.add_argument(
        "--init-speed",
        type=int,
        default=None,
        help="Starting speed level (1-6).",
    )
    parser.add_argument(
        "--start-lines",
        type=int,
        default=None,
        help="Number of bottom rows pre-filled with random tiles.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for a reproducible piece sequence.",
    )
    parser.add_argument(
        "--no-sound",
        action="store_true",
        help="Start with sound turned off.",
    )
    parser.add_argument(
        "--best-score-file",
        type=str,
        default=None,
        help="Where the best score is kept.",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> GameConfig:
    """Load the YAML config and overlay command-line overrides.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ValueError: If a setting is malformed.
    """
    config = GameConfig.from_dict(load_config(args.config))
    return config.replace(
        init_speed=args.init_speed,
        start_lines=args.start_lines,
        seed=args.seed,
        sound=False if args.no_sound else None,
        best_score_file=args.best_score_file,
    )


def main(argv: list[str] | None = None) -> None:
    """Main entry point: parse args, load config, and run the game."""
    args = parse_args(argv)
    try:
        config = build_config(args)
        store = BestScoreStore(config.best_score_path)
        store.load()
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    from tetris_engine.play import play_manual
    play_manual(config, store)


if __name__ == "__main__":
    main()
