"""``python -m gridinterp``: evaluate a JSON table, or run the 3x3 demo without arguments."""

import sys

from .cli import main as cli_main
from .driver import main as driver_main


def main() -> None:
    if len(sys.argv) > 1:
        cli_main(sys.argv[1:])
    else:
        driver_main()


if __name__ == "__main__":
    main()
