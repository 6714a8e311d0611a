#!/usr/bin/env python3
"""
Friction Simulator: quick launcher.

Usage:
    python run_friction.py [options]

Run ``python run_friction.py --help`` for full options.
"""

from friction.app import main

if __name__ == "__main__":
    main()
