import sys

from mlemodels.cli import main

sys.exit(main())
