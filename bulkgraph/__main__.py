import sys

from bulkgraph.cli import main

sys.exit(main())
