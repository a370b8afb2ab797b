"""Module entrypoint for ``python -m pathgroups``.

This keeps module-mode execution behavior identical to the CLI script.
All argument parsing and engine setup happen in ``pathgroups.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
