"""Infrastructure adapters: file loaders, GitHub Actions files, markdown rendering."""
