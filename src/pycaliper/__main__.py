"""Allow ``python -m pycaliper``."""

from .cli import main

main()
