# =============================================================================
# src/cli/__main__.py - Package Entry Point
# =============================================================================
#
# Enables running the CLI package itself as a module:
#     python -m src.cli song "Yesterday" --artist "The Beatles"
#
# Delegates to the lookup CLI, the only command-line tool.
# =============================================================================

"""Allow ``python -m src.cli`` execution."""

from src.cli.lookup import main

main()
