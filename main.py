#!/usr/bin/env python3
"""MCP Echo Server - main entry point.

Speaks JSON-RPC 2.0 over STDIO, one Content-Length framed message at a
time. Diagnostics go to stderr; stdout carries protocol frames only.

================================================================================
DEVELOPER GUIDE: Adding Tools
================================================================================

1. CREATE A PLUGIN
   Add a module under src/mcp_echo_server/tools/ implementing ToolPlugin.
   See src/mcp_echo_server/tools/echo.py for a complete example.

2. REGISTER IT
   Register the plugin on the server before serving:

       server = MCPServer(config=config, log=transport.log)
       server.register_plugin(ReverseTextPlugin())

   Its tools appear in tools/list in registration order and are callable
   through tools/call. The dispatcher itself does not change.

TESTING
-------
See tests/test_tools.py for testing a plugin through the registry, and
tests/test_client.py for driving the real process end to end.

================================================================================
"""

import sys

from mcp_echo_server.cli import main

if __name__ == "__main__":
    sys.exit(main())
