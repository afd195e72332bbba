"""Allows ``python -m depprobe``"""
from depprobe.main import main

if __name__ == "__main__":
    main()
