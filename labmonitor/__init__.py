"""LabMonitor: lab instrument tracking, booking and maintenance service."""
