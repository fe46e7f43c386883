import sys

from handheldkit.cli import main

sys.exit(main())
