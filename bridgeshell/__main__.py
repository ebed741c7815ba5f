import os

from dotenv import load_dotenv

from bridgeshell.cli.commands import app

# Load .env file from ~/.bridgeshell/ if it exists
# Precedence: existing env vars > .env file (override=False)
load_dotenv(os.path.expanduser("~/.bridgeshell/.env"), override=False)

if __name__ == "__main__":
    app()
