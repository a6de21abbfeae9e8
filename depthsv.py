#!/usr/bin/env python3

"""
This script sets up environment paths
and invokes depthsv without installation.
"""

import os
import sys


def main():
    depthsv_root = os.path.dirname(os.path.realpath(__file__))
    sys.path.insert(0, depthsv_root)

    from depthsv.main import main
    sys.exit(main())


if __name__ == "__main__":
    main()
