"""State/store layer.

The scoped store owns every entry; scope resolution and expiry policy are
kept in their own modules so they can be reasoned about (and tested)
without a store instance.
"""
