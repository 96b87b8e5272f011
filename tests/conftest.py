import os
import sys

# test helpers such as fakeContexts live next to the tests
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
