"""
Use cases for patient import and export.
"""

from .export_patients import ExportPatientsUseCase
from .import_patients import ImportPatientsUseCase

__all__ = [
    "ImportPatientsUseCase",
    "ExportPatientsUseCase",
]
