"""
Run with: python -m thoughtmap
"""
import sys

from thoughtmap.main import main

if __name__ == "__main__":
    sys.exit(main())
