# Path: ris/__main__.py
# Purpose: Allow running the CLI with ``python -m ris``.
# Layer: ris.
# Details: Delegates to ris.cli.main.

import sys

from ris.cli import main

sys.exit(main())
