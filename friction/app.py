"""
Application entry point: CLI parsing, dependency checks, Qt launch.
"""

from __future__ import annotations

import argparse
import logging
import sys

from . import __version__


def _check_deps() -> list:
    missing = []
    try:
        import numpy  # noqa: F401
    except ImportError:
        missing.append("numpy")
    try:
        import PyQt5  # noqa: F401
    except ImportError:
        missing.append("PyQt5")
    return missing


def _parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="friction",
        description="Friction: rub two books together and watch the atoms heat up.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "examples:\n"
            "  %(prog)s                            # default settings\n"
            "  %(prog)s --scheme high_contrast     # high contrast colours\n"
            "  %(prog)s --seed 42                  # reproducible evaporation\n"
            "  %(prog)s --cooling-rate 0.1         # slower cooling\n"
            "  %(prog)s -v                         # verbose logging\n"
        ),
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--scheme", type=str, default="classic", help="Colour scheme")
    p.add_argument("--seed", type=int, default=None, help="RNG seed for atom selection and vibration")
    p.add_argument("--fps", type=int, default=60, help="Frame rate (10–120, default 60)")
    p.add_argument("--cooling-rate", type=float, default=None,
                   help="Proportion of temperature lost per second (default 0.2)")
    p.add_argument("--drag-session", type=float, default=1.0,
                   help="Seconds between drags that start a new narration session")
    p.add_argument("--list-schemes", action="store_true", help="List colour schemes and exit")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p.parse_args(argv)


def main(argv=None) -> None:
    args = _parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    logger = logging.getLogger("friction")

    # List schemes
    if args.list_schemes:
        from .palettes import SCHEMES, list_schemes
        print("Available colour schemes:")
        for key in list_schemes():
            s = SCHEMES[key]
            print(f"  {key:14s}  {s.name:16s}  top=rgb{s.top_book}  bottom=rgb{s.bottom_book}")
        sys.exit(0)

    # Dependency check
    missing = _check_deps()
    if missing:
        print(f"ERROR: Missing packages: {', '.join(missing)}\n"
              f"Install: pip install {' '.join(missing)}", file=sys.stderr)
        sys.exit(1)

    # Validate
    if not (10 <= args.fps <= 120):
        print("ERROR: --fps must be 10–120.", file=sys.stderr)
        sys.exit(1)

    if args.cooling_rate is not None and not (0.0 <= args.cooling_rate < 1.0):
        print("ERROR: --cooling-rate must be in [0, 1).", file=sys.stderr)
        sys.exit(1)

    if args.drag_session < 0:
        print("ERROR: --drag-session must not be negative.", file=sys.stderr)
        sys.exit(1)

    from .palettes import SCHEMES, get_scheme
    if args.scheme not in SCHEMES:
        from .palettes import list_schemes
        avail = ", ".join(list_schemes())
        print(f"ERROR: Unknown scheme '{args.scheme}'. Available: {avail}", file=sys.stderr)
        sys.exit(1)

    # Launch
    logger.info("Starting Friction v%s", __version__)
    logger.info("Scheme: %s, FPS: %d, Seed: %s", args.scheme, args.fps, args.seed)

    from PyQt5.QtWidgets import QApplication
    from .describers import DescriptionContext, DescriptionParams, FrictionDescribers
    from .main_window import MainWindow
    from .model import FrictionModel, FrictionParams

    app = QApplication(sys.argv if argv is None else ["friction", *argv])
    app.setStyle("Fusion")
    app.setApplicationName("Friction")
    app.setApplicationVersion(__version__)

    params = FrictionParams()
    if args.cooling_rate is not None:
        params.cooling_rate = args.cooling_rate
    model = FrictionModel(params=params, seed=args.seed)

    context = DescriptionContext(
        model=model,
        params=DescriptionParams(drag_session_threshold=args.drag_session),
    )
    describers = FrictionDescribers(context)

    window = MainWindow(model, get_scheme(args.scheme), describers, fps=args.fps)
    window.resize(1100, 600)
    window.show()

    sys.exit(app.exec_())
