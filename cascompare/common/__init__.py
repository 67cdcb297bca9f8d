"""
Common utilities and shared logic for the CAS model comparison workflow.

Modules:
    io.py          - Config loading and local / GCS artifact I/O.
    session.py     - CAS session lifetime and checked action invocation.
    catalog.py     - Feature catalog built from CAS column metadata.
    registry.py    - Save / promote model tables inside CAS.
    exceptions.py  - Errors raised by the workflow.
    utils.py       - Logging, run ids, hashing.
"""

__all__ = [
    "io",
    "session",
    "catalog",
    "registry",
    "exceptions",
    "utils",
]
