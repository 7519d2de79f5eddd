import sys

from skit_engine.cli import main

sys.exit(main())
