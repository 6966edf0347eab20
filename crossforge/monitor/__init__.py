"""Crossforge release monitor: Rich rendering of runs.

Modules
-------
renderer
    ``ReleaseRenderer`` prints phase transitions and failure diagnostics as
    they happen (it is a ``TargetStateMachine`` listener) and renders the
    final ``RunSummary``, the target matrix and resolved toolchains.
"""
