"""Allow ``python -m iamrecycler``."""

import sys

from iamrecycler.cli import main

sys.exit(main())
