import os
import sys

import afl
from fuzztools import run_all


SMOKE = b'POPM\x00\x00\x00\x0da@b.com\x00\xc4\x00\x00\x00\x2a'


def main():
    run_all(SMOKE)

    buffer = sys.stdin.buffer
    while afl.loop(1000):
        data = buffer.read()
        try:
            run_all(data)
        finally:
            buffer.seek(0)


if __name__ == '__main__':
    main()
    os._exit(0)
