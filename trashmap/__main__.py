"""Allows running the application with ``python -m trashmap``."""

from trashmap.app.entry import main

if __name__ == "__main__":
    main()
