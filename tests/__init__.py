import logging
import os


format = "%(asctime)s %(levelname)s %(name)s %(message)s"

if bool(os.environ.get("WSBRIDGE_DEBUG")):  # pragma: no cover
    # Display every event sent or received in debug mode.
    level = logging.DEBUG
else:
    # Hide stack traces of exceptions.
    level = logging.CRITICAL

logging.basicConfig(format=format, level=level)
