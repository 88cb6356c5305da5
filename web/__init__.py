"""Static hosting for the built Permitsy single page application."""
