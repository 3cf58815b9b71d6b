"""Allow ``python -m report_assembler``."""

import sys

from .cli import main

sys.exit(main())
