"""Template repository acquisition: clone, SSH fallback and degit."""
