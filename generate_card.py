#!/usr/bin/env python3
"""Entry point for generating an agent trading card from a checkout."""

from agentmon.cli import main


if __name__ == "__main__":
    main()
