"""fleetdrop — declarative file deployment to fleets of remote hosts."""

__version__ = "0.1.0"
