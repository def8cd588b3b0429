"""A dev entrypoint for running the pastebin."""

import os

from pastebin import create_app

app = create_app(os.getenv("ENV", "development"))

if __name__ == "__main__":
    app.run(port=int(os.getenv("PORT", "3000")), debug=True)
