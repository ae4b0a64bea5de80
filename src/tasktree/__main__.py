"""Entry point for running tasktree as a module."""

# main() in cli.py is the error boundary: it prints the failure and exits 1.

from tasktree.cli import main

if __name__ == "__main__":
    main()
