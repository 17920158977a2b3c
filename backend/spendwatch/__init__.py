"""Budget progress, bill state and budget audit-log engine.

Every operation is a pure function of the records and the ``now`` passed in;
nothing here reads a clock or a store.
"""

__version__ = "0.1.0"
