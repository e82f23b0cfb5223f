import sys

from nodepack.cli import main

if __name__ == "__main__":
    sys.exit(main())
