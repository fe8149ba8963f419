"""covm command line interface."""
