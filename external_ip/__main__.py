"""Allow running the command line tool as ``python -m external_ip``."""

from external_ip.cli.commands import run_external_ip

run_external_ip()
