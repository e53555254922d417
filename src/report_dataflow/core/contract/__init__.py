"""Report DataFlow — Contract (core).

Componentes canônicos do **Workbook Contract v1**, o schema declarativo
que toda planilha do workbook deve respeitar:
 - parsing (YAML/JSON)
 - validação estrutural
 - hashing canônico (rastreabilidade)
"""

from .errors import (  # noqa: F401
    ContractError,
    ContractPathMissingError,
    ContractFileNotFoundError,
    ContractParseError,
    UnsupportedContractFormatError,
    ContractValidationError,
)

from .hashing import compute_contract_hash  # noqa: F401
from .loader import load_contract  # noqa: F401
from .schema import ColumnSpec, WorkbookContractV1, validate_workbook_contract_v1  # noqa: F401
