"""Entry point for `python -m notebox`."""

from notebox.main import run

if __name__ == "__main__":
    run()
