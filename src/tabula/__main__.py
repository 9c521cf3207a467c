"""Run the tabula viewer: ``python -m tabula``."""

from tabula.gui.app import main

if __name__ in {"__main__", "__mp_main__"}:
    main()
