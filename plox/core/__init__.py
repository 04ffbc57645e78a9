"""Language core: tokens, scanner, syntax tree, parser, environments, callables and the interpreter."""
