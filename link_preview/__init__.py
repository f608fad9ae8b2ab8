"""link-preview-fetch command-line package."""
