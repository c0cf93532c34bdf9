"""Interactive front-ends (console REPL)."""
