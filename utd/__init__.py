"""utd: a command-line tracker for tasks and notes."""
