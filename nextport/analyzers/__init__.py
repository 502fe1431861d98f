"""Per-file and project-wide analysis of React sources."""
