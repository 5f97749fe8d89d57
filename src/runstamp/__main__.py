import sys

from runstamp.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
