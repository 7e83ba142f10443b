#!/usr/bin/env python3
"""
Entry point for running the AI-Archive MCP server package directly.
This allows the package to be executed as: python -m ai_archive_mcp
"""

from . import main

if __name__ == "__main__":
    main()
