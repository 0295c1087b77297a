import sys

from bootimg.cli import main

sys.exit(main())
