import sys

from db_dock.cli import main

sys.exit(main())
