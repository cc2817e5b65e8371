"""
KoreLang Studio -- state and persistence core of the conlang designer.

Package layout:
    services/   Event bus, project store, persistence, command executor,
                terminal interpreter, session wiring
    theme/      Theme presets and palette resolution
    config.py   Session configuration
    paths.py    Platform data directories
    main.py     Console entry point
"""
