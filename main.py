# main.py
import sys

from lane_coverage.cli import main

if __name__ == "__main__":
    # e.g. python main.py --graph town.json --start 101 --goal 205 --strategy dfs
    sys.exit(main())
