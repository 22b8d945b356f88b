import sys

from mcp_echo_server.cli import main

sys.exit(main())
