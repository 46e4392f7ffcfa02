"""
ParkPics Deployment Entry Point
Run from the project root: python deploy.py [--network NAME] [--compile]
"""

import sys

from scripts.deploy import main

if __name__ == "__main__":
    sys.exit(main())
