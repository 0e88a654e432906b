"""Allow ``python -m cudblank``."""

import sys

from .cli import main

sys.exit(main())
