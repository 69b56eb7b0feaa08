"""Entry point for running the resolver CLI."""

from wally_registry.cli import main

if __name__ == "__main__":
    main()
