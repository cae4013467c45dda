import sys

from zshprof.cli import main

sys.exit(main())
