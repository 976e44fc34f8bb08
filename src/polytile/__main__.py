"""Allow running the solver with `python -m polytile`."""

from polytile import main

main()
