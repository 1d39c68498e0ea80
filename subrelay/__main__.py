"""Entry point for running subrelay as a module.

This allows running the application with:
    python -m subrelay [COMMAND] [OPTIONS]
"""

from subrelay.cli import app

if __name__ == "__main__":
    app()
