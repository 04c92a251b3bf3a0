"""Entry point for python -m folder_diff."""

from .cli import main

if __name__ == "__main__":
    main()
