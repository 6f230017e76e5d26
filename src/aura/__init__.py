"""
Aura - Voice Check-in Backend

Turns a recorded voice check-in into a therapeutic response:
text, synthesized audio, and an asynchronously produced video.

IMPORTANT: Check-ins can surface crisis content.
The crisis gate runs before any automated response is produced.
"""

__version__ = "0.1.0"
__author__ = "Aura Engineering Team"
