"""Allow ``python -m songmatch.cli`` execution."""

import sys

from songmatch.cli.search import main

sys.exit(main())
