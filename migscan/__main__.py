import sys

from migscan.cli import main

sys.exit(main())
