"""Built-in plugins shipped with micropress."""
