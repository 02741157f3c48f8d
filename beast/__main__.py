# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
CLI entrypoint for `python -m beast`.
"""

from .beastc import main

if __name__ == "__main__":
	import sys
	sys.exit(main())
