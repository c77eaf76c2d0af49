"""Allow ``python -m covsubmit``."""

import sys

from covsubmit.cli import main

sys.exit(main())
