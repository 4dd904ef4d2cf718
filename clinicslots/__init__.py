"""
clinicslots - appointment conflict detection and slot availability for clinics.
"""

__version__ = "0.1.0"
