from cardledger.parsers.spreadsheet import (
    SUPPORTED_EXTENSIONS,
    apply_row_defaults,
    build_import_template,
    normalize_header,
    parse_spreadsheet,
)

__all__ = [
    "SUPPORTED_EXTENSIONS",
    "apply_row_defaults",
    "build_import_template",
    "normalize_header",
    "parse_spreadsheet",
]
