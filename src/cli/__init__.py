# =============================================================================
# src/cli/__init__.py - CLI Module Overview
# =============================================================================
#
# Command-line access to whenItDropped without the web server.  The
# lookup tool builds the same providers and orchestrator as the API and
# renders each panel to the terminal through a console sink.
#
# Architecture Notes:
#   - argparse only (not Click/Typer) to keep the CLI dependency-free.
#   - src.main is imported lazily inside functions so argument errors
#     are reported before any providers are built.
# =============================================================================

"""CLI tools for whenItDropped.

- ``python -m src.cli.lookup`` - run a song, album or date session and
  print the panels as they arrive.
"""
