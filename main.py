import sys

from stay_sync.pollers.sync import main

if __name__ == "__main__":
    sys.exit(main())
