"""Puzzle session rules: scrambling, tile turns, ranking and round state.

Nothing here imports Flask or Socket.IO. ``GameSession`` talks to clients
only through the fanout object it is given, so the whole round lifecycle can
be driven from plain tests.
"""
