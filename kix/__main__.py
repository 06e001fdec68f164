import sys

from kix.cli import main

sys.exit(main())
