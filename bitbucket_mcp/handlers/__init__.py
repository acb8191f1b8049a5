"""Per-resource tool handlers. Each takes raw arguments and returns a ToolResponse."""
