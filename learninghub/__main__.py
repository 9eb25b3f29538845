import sys

from learninghub.app import run

sys.exit(run())
