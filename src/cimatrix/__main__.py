"""Allow running cimatrix as a module: python -m cimatrix."""

from cimatrix.cli.commands import main

if __name__ == "__main__":
    main()
