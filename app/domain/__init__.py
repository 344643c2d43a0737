"""
app/domain package marker.
"""

from app.domain.import_summary import ImportSummary
from app.domain.importable import (
    CompositeImportable,
    Dependent,
    Importable,
    ImportKey,
    InvalidComparisonError,
    import_equal,
)

__all__ = [
    "CompositeImportable",
    "Dependent",
    "ImportKey",
    "ImportSummary",
    "Importable",
    "InvalidComparisonError",
    "import_equal",
]
