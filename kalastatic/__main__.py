import sys

from kalastatic.cli import main

sys.exit(main())
