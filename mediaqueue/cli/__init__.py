"""mediaqueue command line interface."""
