"""
Pytest configuration file for pokedex tests.
"""

import sys
from pathlib import Path

# Make the pokedex package importable without installing it
sys.path.insert(0, str(Path(__file__).parent))
