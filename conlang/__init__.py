"""
conlang -- Data layer of KoreLang Studio.

Models, reconciliation of stored records, lexicon rules and key-value
record storage.  Nothing in this package depends on Qt.
"""
