"""
VitalScribe Interchange: patient record import/export for the VitalScribe clinic suite.

Reconciles free-form patient spreadsheets into canonical patient and
consultation records, and serializes the canonical store back into a
portable backup file.
"""

__version__ = "0.1.0"
__author__ = "VitalScribe Team"
__description__ = "Patient record interchange engine"
