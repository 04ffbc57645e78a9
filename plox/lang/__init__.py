"""Language driver layer: diagnostics, sessions and the command-line shell."""
