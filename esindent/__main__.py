"""Allow `python -m esindent`."""

import sys

from .cli import main

sys.exit(main())
