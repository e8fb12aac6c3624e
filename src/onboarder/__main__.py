"""Entry point for running onboarder as a module.

Usage:
    python -m onboarder [command] [options]

Example:
    python -m onboarder run https://github.com/acme/widgets --branch main
    python -m onboarder analyze ./local-clone
"""

from onboarder.cli import app

if __name__ == "__main__":
    app()
