"""Allow ``python -m lmtdiag``."""

from lmtdiag.cli.app import main

main()
