from fastmcp import FastMCP

mcp = FastMCP("figma-tokens")
