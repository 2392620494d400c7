#!/usr/bin/env python3
"""
run_projection.py - Lifespan Projection Runner

Runs the projection from a source checkout without installing the package:

Usage:
    python run_projection.py -birth 1985-07-14 -sex f
    python run_projection.py -age 40 -sex m -data-year 2023

Author: Lifespan Projection Project
Version: 1.0.0
"""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from lifespan_projection.cli import main


if __name__ == '__main__':
    main()
