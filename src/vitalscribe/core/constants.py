"""
Shared constants for the interchange engine.
"""

# Summary written on consultations fabricated from a bare visit date
SYSTEM_GENERATED_SUMMARY = "Registro importado desde respaldo administrativo."

# Marker written in the export when a patient has no consultations
NO_HISTORY_MARKER = "Sin historial"

# Placeholder for absent phone/gender in the export
EXPORT_MISSING_VALUE = "N/A"

# Text values that mean "no data" (compared case-insensitively after trimming)
ABSENT_TEXT_SENTINELS = frozenset({"", "n/a", "na", "null", "undefined"})

# Visit-date values that carry no visit signal
VISIT_DATE_SENTINELS = frozenset({"", "sin historial", "n/a"})

# Origin tag stored in the payload of imported consultations
IMPORT_ORIGIN = "spreadsheet_import"

# Backup export header row, in column order
EXPORT_COLUMNS = [
    "ID Sistema",
    "Nombre Completo",
    "Teléfono",
    "Email",
    "Género",
    "Fecha Nacimiento",
    "Fecha Registro",
    "Última Consulta",
]

# Optional ninth column (latest consultation summary)
EXPORT_SUMMARY_COLUMN = "Resumen Clínico"

# Ages accepted when synthesizing a birth date (exclusive bounds)
MIN_AGE_EXCLUSIVE = 0
MAX_AGE_EXCLUSIVE = 120
