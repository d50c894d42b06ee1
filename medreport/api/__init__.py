"""API entry points for medreport."""
