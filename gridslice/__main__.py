"""Entry point for python -m gridslice execution.

    python -m gridslice serve
    python -m gridslice preview --scroll-top 4000
    python -m gridslice --help
"""

from gridslice.cli import run

if __name__ == "__main__":
    run()
