"""Allow ``python -m nginxarch`` to run the nginx-util tool."""

from nginxarch.main import util_main

if __name__ == "__main__":
    util_main()
