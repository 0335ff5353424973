# -*- coding: utf-8 -*-
"""
Standalone launcher for the East Van Breweries viewer.

Lets end-users start the GUI with:

    python EastVanBreweries.py

It performs no application logic itself; it delegates to `app.main.main()`.
"""

# EastVanBreweries.py
from app.main import main

if __name__ == "__main__":
    main()
