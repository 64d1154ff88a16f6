# Development scripts
