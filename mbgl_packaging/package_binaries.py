#!/usr/bin/env python3
"""
Standalone entrypoint, the equivalent of running the packaging step from a
release job: `python -m mbgl_packaging.package_binaries package`
"""
from mbgl_packaging.core.cli import main

if __name__ == '__main__':
    main()
