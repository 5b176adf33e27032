"""
Admission control for the Ping service.

Holds the process-lifetime gate that caps how many GET requests are served.
"""

from .gate import AdmissionGate, AdmissionStats

__all__ = ["AdmissionGate", "AdmissionStats"]
