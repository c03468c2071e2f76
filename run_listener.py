#!/usr/bin/env python3
"""Start the user listener."""
import sys

from userlistener import cli


if __name__ == '__main__':
    sys.exit(cli.main())
