from . import (
    canon,
    config,
    exceptions,
    types,
    history,
    dates,
    validate,
    projection,
    summary,
    ingest,
    store,
)

__all__ = [
    "canon",
    "config",
    "exceptions",
    "types",
    "history",
    "dates",
    "validate",
    "projection",
    "summary",
    "ingest",
    "store",
]
