"""Allow running ShiftPrint with ``python -m shiftprint``."""

from .cli import main

if __name__ == "__main__":
    main()
