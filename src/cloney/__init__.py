"""Package initialization for cloney.

cloney copies a Tezos contract (code plus a derived storage value) from one
network to another, optionally carrying over the content of its big maps.
The public entry point is `cloney.session.CloneSession`; `python -m cloney`
exposes the same pipeline as a CLI.
"""

__all__ = []
