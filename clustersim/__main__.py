#!/usr/bin/env python3
"""
Cluster Simulator command-line entry point.
"""
from .cli import cli

if __name__ == '__main__':
    cli(prog_name="clustersim")
