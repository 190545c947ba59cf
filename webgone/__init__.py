"""
webgone - internet outage monitor.

Probes a TCP endpoint on a fixed interval, records outages to a local
database and reports statistics, CSV exports and downtime cost.
"""

__version__ = "0.1.0"
