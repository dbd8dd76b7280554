"""Tool registry, validation, dispatch and response contracts for clickup-mcp."""
