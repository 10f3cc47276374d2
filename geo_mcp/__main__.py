import sys

from geo_mcp.cli import main

sys.exit(main())
