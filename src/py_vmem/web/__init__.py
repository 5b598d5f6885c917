"""Browser-facing inspection API for the memory simulator.

This package provides a Flask application that exposes one
``MemoryManager`` over HTTP.  It is an **optional** extra — install
with::

    pip install py-vmem[web]

The ``create_app`` factory in ``app.py`` serves read-only snapshots of
physical memory, the page table, and swap, plus ``load``/``store``
endpoints that drive the simulation.
"""
