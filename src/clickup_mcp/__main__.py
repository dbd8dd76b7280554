"""Enables running the server via: python -m clickup_mcp"""

from clickup_mcp.server import main

if __name__ == "__main__":
    main()
