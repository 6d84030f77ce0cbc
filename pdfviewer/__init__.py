"""Local server for the browser PDF viewer."""
