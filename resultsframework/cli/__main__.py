"""
Results Framework CLI entry point.

Usage:
    python -m resultsframework.cli show framework.json
    python -m resultsframework.cli indicators framework.json
    python -m resultsframework.cli normalize framework.json --output clean.json
"""

import sys
from .main import main

if __name__ == "__main__":
    sys.exit(main())
