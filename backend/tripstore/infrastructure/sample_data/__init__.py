"""Built-in sample datasets shipped with the package."""
