import asyncio

def main():
    """Main entry point for the package."""
    # Lazy import to avoid loading the MCP stack at package import time
    from . import server
    asyncio.run(server.main())

__all__ = [
    "main",
]
