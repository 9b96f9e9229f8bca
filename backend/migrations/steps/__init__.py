"""Individual schema and data migrations, one module per concern."""
