"""Allow ``python -m ecsconf``."""

from ecsconf.cli.main import main

if __name__ == "__main__":
    main()
