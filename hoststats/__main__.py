import sys

from hoststats.main import main

sys.exit(main())
