"""Allow running as `python -m yonk`."""

from yonk.cli.app import main

if __name__ == "__main__":
    main()
