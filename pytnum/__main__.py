import sys

from pytnum.cli import main

sys.exit(main())
