"""Exporter modules for the Google Cloud telemetry backends.

Each signal is isolated in its own subpackage: spans go to Cloud Trace,
metrics to Cloud Monitoring.
"""
