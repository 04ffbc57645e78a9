"""Tree-walking interpreter for the Lox language."""
